"""Load registry directories into ``RegistryIndex`` instances."""

from __future__ import annotations

import tomllib
from pathlib import Path

from rtt.errors import RegistryLoadError
from rtt.registry.models import PackageEntry, RegistryIndex

REGISTRY_FILE = "Registry.toml"


class RegistryInstanceLoader:
    """Reads the ``Registry.toml`` at the root of each snapshot."""

    def load(self, snapshot_paths: list[str | Path]) -> list[RegistryIndex]:
        """Load every snapshot, preserving order."""
        return [self.load_one(p) for p in snapshot_paths]

    def load_one(self, snapshot_path: str | Path) -> RegistryIndex:
        path = Path(snapshot_path)
        registry_file = path / REGISTRY_FILE
        if not registry_file.exists():
            raise RegistryLoadError(str(path), f"missing {REGISTRY_FILE}")

        try:
            with open(registry_file, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise RegistryLoadError(str(registry_file), f"invalid TOML ({e})") from e

        return registry_from_dict(data, path)


def registry_from_dict(data: dict, path: Path) -> RegistryIndex:
    if "name" not in data or "uuid" not in data:
        raise RegistryLoadError(str(path), f"{REGISTRY_FILE} lacks name or uuid")

    packages = {
        uuid: PackageEntry(uuid=uuid, name=info.get("name", ""), path=info.get("path", ""))
        for uuid, info in data.get("packages", {}).items()
    }
    return RegistryIndex(
        name=data["name"],
        uuid=data["uuid"],
        repo=data.get("repo", ""),
        description=data.get("description", "").strip(),
        path=path.resolve(),
        packages=packages,
    )
