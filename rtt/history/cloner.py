"""History mirrors: commit metadata for a registry without file content."""

from __future__ import annotations

import logging
from pathlib import Path

from rtt.models import HistoryMirror, RegistrySource
from rtt.utils.git_ops import clone

logger = logging.getLogger(__name__)

HISTORY_SUFFIX = "_history"


class RegistryHistoryCloner:
    """Keeps one history mirror per registry under ``registries_dir``.

    A mirror is created once and never refreshed: an existing directory is
    trusted as-is, even if a previous clone into it failed half way.
    """

    def __init__(self, registries_dir: str | Path, remote_ref: str = "origin"):
        self.registries_dir = Path(registries_dir)
        self.remote_ref = remote_ref

    def mirror_path(self, source: RegistrySource) -> Path:
        return self.registries_dir / f"{source.name}{HISTORY_SUFFIX}"

    def ensure_history(self, source: RegistrySource) -> HistoryMirror:
        path = self.mirror_path(source)
        mirror = HistoryMirror(source=source, path=path, remote_ref=self.remote_ref)

        if path.is_dir():
            logger.debug("history of %s already present at %s", source.name, path)
            return mirror

        self.registries_dir.mkdir(parents=True, exist_ok=True)
        logger.info("cloning registry history of %s", source.name)
        clone(
            source.name,
            source.url,
            path,
            filter="blob:none",
            no_checkout=True,
            single_branch=True,
        )
        return mirror
