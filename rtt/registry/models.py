"""Registry index models: what a loaded snapshot exposes to a package resolver."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class PackageEntry:
    """A single package listed in a registry's ``Registry.toml``."""

    uuid: str
    name: str
    path: str  # Relative to the registry root, e.g. "J/JSON"


@dataclass
class RegistryIndex:
    """In-memory view of one registry directory."""

    # Identity
    name: str
    uuid: str
    repo: str = ""
    description: str = ""

    # Location on disk
    path: Path = field(default_factory=Path)

    # Packages keyed by UUID
    packages: dict[str, PackageEntry] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.packages)

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self.packages.values())

    def uuids_from_name(self, name: str) -> list[str]:
        return [uuid for uuid, p in self.packages.items() if p.name == name]

    def get(self, name: str) -> PackageEntry | None:
        for entry in self.packages.values():
            if entry.name == name:
                return entry
        return None

    def versions(self, name: str) -> dict[str, dict]:
        """Versions recorded for ``name`` (``Versions.toml``), empty if unknown."""
        entry = self.get(name)
        if entry is None:
            return {}
        versions_file = self.path / entry.path / "Versions.toml"
        if not versions_file.exists():
            return {}
        with open(versions_file, "rb") as f:
            return tomllib.load(f)
