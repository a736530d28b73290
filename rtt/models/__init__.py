"""Data models shared by the history, snapshot and registry layers."""

from rtt.models.records import (
    CommitRecord,
    HistoryMirror,
    PackageReference,
    RegistrySnapshot,
    RegistrySource,
    SnapshotLayout,
    TravelPlan,
)

__all__ = [
    "CommitRecord",
    "HistoryMirror",
    "PackageReference",
    "RegistrySnapshot",
    "RegistrySource",
    "SnapshotLayout",
    "TravelPlan",
]
