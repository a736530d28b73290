"""Shallow snapshots: a registry's file tree at exactly one commit.

The history mirror only carries commit metadata, which is cheap to search.
The snapshot carries file content for one commit only, which is cheap to
download compared to the full history with content (for the General
registry, hundreds of megabytes).
"""

from __future__ import annotations

import logging
from pathlib import Path

from rtt.models import CommitRecord, RegistrySnapshot, RegistrySource, SnapshotLayout
from rtt.utils.git_ops import clone, head_commit, run_git

logger = logging.getLogger(__name__)


class ShallowSnapshotCloner:
    """Materializes pinned registry snapshots under ``registries_dir``."""

    def __init__(
        self,
        registries_dir: str | Path,
        layout: SnapshotLayout = SnapshotLayout.BY_NAME,
    ):
        self.registries_dir = Path(registries_dir)
        self.layout = layout

    def snapshot_path(self, source: RegistrySource, commit: CommitRecord) -> Path:
        if self.layout is SnapshotLayout.BY_COMMIT:
            return self.registries_dir / f"{source.name}@{commit.short_hash}"
        return self.registries_dir / source.name

    def materialize(self, source: RegistrySource, commit: CommitRecord) -> RegistrySnapshot:
        """Check out ``source`` at ``commit``, unless the snapshot directory exists.

        An existing directory is never updated, so with the by-name layout a
        snapshot taken for an earlier date stays pinned to that date.
        """
        path = self.snapshot_path(source, commit)

        if path.is_dir():
            if self.layout is SnapshotLayout.BY_NAME:
                current = head_commit(path)
                if current != commit.hash:
                    logger.warning(
                        "reusing snapshot %s pinned to %s, not %s (%s); remove it to re-pin",
                        path, current or "an unreadable commit", commit.short_hash, commit.timestamp,
                    )
            logger.debug("snapshot of %s already present at %s", source.name, path)
            return RegistrySnapshot(source=source, commit=commit, path=path, reused=True)

        self.registries_dir.mkdir(parents=True, exist_ok=True)
        logger.info("cloning registry %s head at depth 1", source.name)
        repo = clone(source.name, source.url, path, depth=1)

        logger.info(
            "pulling registry %s at commit %s for date %s",
            source.name, commit.hash, commit.timestamp,
        )
        run_git(source.name, repo, "fetch", "--depth=1", "origin", commit.hash)
        run_git(source.name, repo, "checkout", commit.hash)

        return RegistrySnapshot(source=source, commit=commit, path=path)
