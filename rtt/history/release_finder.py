"""Find when a package version was published in a registry's history."""

from __future__ import annotations

import logging

from rtt.errors import PackageNotFoundError
from rtt.history.detectors import GENERAL_REGISTRY, ReleaseEventDetector
from rtt.models import CommitRecord, HistoryMirror, PackageReference
from rtt.utils.git_ops import commit_timestamp, open_repo, run_git

logger = logging.getLogger(__name__)


def release_search_args(pattern: str, ref: str) -> list[str]:
    """Arguments for ``git log`` listing first-parent commits matching ``pattern``.

    Output lines are ``<hash>\\t<subject>``, newest first.
    """
    return [
        "--first-parent",
        "--fixed-strings",
        f"--grep={pattern}",
        "--format=%H%x09%s",
        ref,
    ]


class ReleaseDateFinder:
    """Locates the release-event commit for a package version."""

    def __init__(self, detector: ReleaseEventDetector = GENERAL_REGISTRY):
        self.detector = detector

    def find_release(self, mirror: HistoryMirror, package: PackageReference) -> CommitRecord | None:
        """Return the release commit, or None if the mirror has no such event."""
        repo = open_repo(mirror.source_name, mirror.path)
        wanted = (package.name, package.version)

        for pattern in self.detector.patterns(package):
            output = run_git(
                mirror.source_name,
                repo,
                "log",
                *release_search_args(pattern, mirror.remote_ref),
            )
            for line in output.splitlines():
                commit, _, subject = line.partition("\t")
                # grep matches substrings; "v1.2.3" must not match "v1.2.30"
                if self.detector.parse(subject) == wanted:
                    timestamp = commit_timestamp(mirror.source_name, repo, commit)
                    logger.debug(
                        "%s released in %s at %s (%s)",
                        package.qualified_id, mirror.source_name, timestamp, commit,
                    )
                    return CommitRecord(hash=commit, timestamp=timestamp)
        return None

    def locate_release(self, mirror: HistoryMirror, package: PackageReference) -> CommitRecord:
        """Return the release commit or raise ``PackageNotFoundError``."""
        record = self.find_release(mirror, package)
        if record is None:
            raise PackageNotFoundError(package.name, package.version, mirror.source_name)
        return record
