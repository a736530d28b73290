"""Temporal registry resolution: registries as they were at a package release.

For a package version, find the date it was released in its registry, then
check out every registry as of that date. Installing the package against
the returned indexes resolves dependencies with only what was published at
that moment.

Each registry is cloned twice to keep downloads small:

* once with history only (no file content) to search commits;
* once at depth 1 to get file content for the single chosen commit.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rtt.config import Settings
from rtt.errors import ConfigError, PackageNotFoundError
from rtt.history.cloner import RegistryHistoryCloner
from rtt.history.date_resolver import DateBasedCommitResolver
from rtt.history.detectors import GENERAL_REGISTRY, ReleaseEventDetector
from rtt.history.release_finder import ReleaseDateFinder
from rtt.models import (
    CommitRecord,
    HistoryMirror,
    PackageReference,
    RegistrySnapshot,
    RegistrySource,
    SnapshotLayout,
    TravelPlan,
)
from rtt.registry.loader import RegistryInstanceLoader
from rtt.registry.models import RegistryIndex
from rtt.snapshot.cloner import ShallowSnapshotCloner

logger = logging.getLogger(__name__)


class TemporalRegistryResolver:
    """Runs the whole pipeline, one registry at a time, failing fast."""

    def __init__(
        self,
        registries_dir: str | Path,
        layout: SnapshotLayout = SnapshotLayout.BY_NAME,
        remote_ref: str = "origin",
        detector: ReleaseEventDetector = GENERAL_REGISTRY,
    ):
        self.registries_dir = Path(registries_dir).resolve()
        self.history_cloner = RegistryHistoryCloner(self.registries_dir, remote_ref=remote_ref)
        self.release_finder = ReleaseDateFinder(detector)
        self.date_resolver = DateBasedCommitResolver()
        self.snapshot_cloner = ShallowSnapshotCloner(self.registries_dir, layout=layout)
        self.loader = RegistryInstanceLoader()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "TemporalRegistryResolver":
        return cls(
            settings.registries_dir,
            layout=settings.snapshot_layout,
            remote_ref=settings.remote_ref,
            **kwargs,
        )

    def plan(self, package: PackageReference, sources: list[RegistrySource]) -> TravelPlan:
        """Resolve the commit every registry pins to, without fetching content."""
        _check_sources(sources)

        mirrors = [self.history_cloner.ensure_history(s) for s in sources]
        release_mirror, release = self.locate_release(package, mirrors)
        logger.info(
            "%s was released in %s at %s",
            package.qualified_id, release_mirror.source_name, release.timestamp,
        )

        # Every registry is projected onto the same instant, including the
        # one holding the package. All are resolved before any snapshot is
        # cloned so a registry that did not exist yet aborts the run early.
        pins = [
            (m.source, self.date_resolver.resolve_before_or_at(m, release.timestamp))
            for m in mirrors
        ]
        return TravelPlan(
            package=package,
            release_registry=release_mirror.source,
            release=release,
            pins=pins,
        )

    def materialize(self, plan: TravelPlan) -> list[RegistrySnapshot]:
        return [self.snapshot_cloner.materialize(source, commit) for source, commit in plan.pins]

    def travel_to_release(
        self, package: PackageReference, sources: list[RegistrySource]
    ) -> list[RegistryIndex]:
        """Registries as of ``package``'s release, in the order of ``sources``."""
        plan = self.plan(package, sources)
        snapshots = self.materialize(plan)
        return self.loader.load([s.path for s in snapshots])

    def locate_release(
        self, package: PackageReference, mirrors: list[HistoryMirror]
    ) -> tuple[HistoryMirror, CommitRecord]:
        """Search mirrors in order; the first holding the release event wins."""
        for mirror in mirrors:
            release = self.release_finder.find_release(mirror, package)
            if release is not None:
                return mirror, release
            logger.debug("%s not found in %s", package.qualified_id, mirror.source_name)
        raise PackageNotFoundError(
            package.name, package.version, [m.source_name for m in mirrors]
        )


def travel_to_release(
    name: str,
    version: str,
    sources: list[RegistrySource] | None = None,
    settings: Settings | None = None,
) -> list[RegistryIndex]:
    """Convenience wrapper: travel using ``settings`` (or the environment's).

    Example::

        indexes = travel_to_release("JSON3", "1.9.3")
        # hand ``indexes`` to the package manager, with registry updates disabled
    """
    from rtt.config import load_settings

    settings = settings or load_settings()
    resolver = TemporalRegistryResolver.from_settings(settings)
    return resolver.travel_to_release(
        PackageReference(name=name, version=version),
        sources if sources is not None else settings.sources(),
    )


def _check_sources(sources: list[RegistrySource]) -> None:
    if not sources:
        raise ConfigError("no registries to travel with")
    names = [s.name for s in sources]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigError(f"duplicate registry names: {', '.join(duplicates)}")
