"""Discover the registries installed in the local package depots.

Each depot keeps its registries under ``<depot>/registries`` either unpacked
(``General/Registry.toml``) or packed (``General.toml`` pointing at
``General.tar.gz``).
"""

from __future__ import annotations

import logging
import tarfile
import tomllib
from pathlib import Path

from rtt.errors import ConfigError
from rtt.models import RegistrySource
from rtt.registry.loader import REGISTRY_FILE

logger = logging.getLogger(__name__)


def discover_registries(depot_paths: list[Path]) -> list[RegistrySource]:
    """List the registries reachable from ``depot_paths``, first depot wins."""
    sources: dict[str, RegistrySource] = {}

    for depot in depot_paths:
        registries_dir = Path(depot) / "registries"
        if not registries_dir.is_dir():
            continue

        for entry in sorted(registries_dir.iterdir()):
            try:
                data = _read_registry_toml(entry)
            except (tomllib.TOMLDecodeError, tarfile.TarError) as e:
                raise ConfigError(f"cannot read registry at {entry}: {e}") from e
            if data is None:
                continue
            name, repo = data.get("name"), data.get("repo")
            if not name or not repo:
                logger.debug("skipping %s: no name or repo", entry)
                continue
            sources.setdefault(name, RegistrySource(name=name, url=repo))

    return list(sources.values())


def _read_registry_toml(entry: Path) -> dict | None:
    if entry.is_dir():
        registry_file = entry / REGISTRY_FILE
        if not registry_file.exists():
            return None
        with open(registry_file, "rb") as f:
            return tomllib.load(f)

    if entry.suffix == ".toml":
        with open(entry, "rb") as f:
            pointer = tomllib.load(f)
        tarball = entry.parent / pointer.get("path", "")
        if not pointer.get("path") or not tarball.is_file():
            return None
        return _read_from_tarball(tarball)

    return None


def _read_from_tarball(tarball: Path) -> dict | None:
    with tarfile.open(tarball) as tar:
        for member in tar.getmembers():
            if member.name.lstrip("./") == REGISTRY_FILE:
                f = tar.extractfile(member)
                if f is not None:
                    return tomllib.load(f)
    logger.debug("no %s inside %s", REGISTRY_FILE, tarball)
    return None
