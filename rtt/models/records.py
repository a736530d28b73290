"""Core data models for registry time travel.

Covers: registry sources, package references, commit records, and the
on-disk artifacts (history mirrors, snapshots) produced while resolving a
registry at a point in time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

# Format git prints for %ci / %ai, e.g. "2023-05-01 10:00:00 +0000"
GIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"


class SnapshotLayout(Enum):
    """How snapshot directories are keyed under the registries directory."""

    BY_NAME = "by-name"  # <root>/<name>, one snapshot per registry
    BY_COMMIT = "by-commit"  # <root>/<name>@<short-hash>, snapshots coexist


@dataclass(frozen=True)
class RegistrySource:
    """A registry to travel with: its name and the remote it is cloned from."""

    name: str
    url: str

    def __str__(self) -> str:
        return f"{self.name} ({self.url})"


@dataclass(frozen=True)
class PackageReference:
    """The package version whose release date anchors the run."""

    name: str
    version: str
    uuid: str = ""

    def __post_init__(self) -> None:
        # Registries write "v1.2.3" in commit messages; accept either spelling.
        if self.version.startswith("v"):
            object.__setattr__(self, "version", self.version[1:])

    @property
    def tagged_version(self) -> str:
        return f"v{self.version}"

    @property
    def qualified_id(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class CommitRecord:
    """A commit hash plus the timestamp exactly as git reported it."""

    hash: str
    timestamp: str

    @property
    def short_hash(self) -> str:
        return self.hash[:10]

    def as_datetime(self) -> datetime:
        """Parse ``timestamp`` into an aware datetime.

        Accepts git's ``%ci`` form as well as ISO 8601.
        """
        try:
            return datetime.strptime(self.timestamp, GIT_DATE_FORMAT)
        except ValueError:
            return datetime.fromisoformat(self.timestamp)


@dataclass
class HistoryMirror:
    """A blob-less, checkout-less clone of a registry's full history."""

    source: RegistrySource
    path: Path
    remote_ref: str = "origin"
    """Ref the first-parent walk starts from (the remote-tracked default branch)."""

    @property
    def source_name(self) -> str:
        return self.source.name


@dataclass
class RegistrySnapshot:
    """A working tree of a registry checked out at one historical commit."""

    source: RegistrySource
    commit: CommitRecord
    path: Path
    reused: bool = False
    """True when the directory already existed and nothing was fetched."""


@dataclass
class TravelPlan:
    """Which commit every registry pins to for one package release."""

    package: PackageReference
    release_registry: RegistrySource
    release: CommitRecord
    pins: list[tuple[RegistrySource, CommitRecord]] = field(default_factory=list)

    @property
    def release_date(self) -> str:
        return self.release.timestamp

    def commit_for(self, name: str) -> CommitRecord | None:
        for source, commit in self.pins:
            if source.name == name:
                return commit
        return None
