"""Resolve the latest registry commit at or before a timestamp."""

from __future__ import annotations

import logging

from rtt.errors import NoCommitBeforeDateError
from rtt.models import CommitRecord, HistoryMirror
from rtt.utils.git_ops import commit_timestamp, open_repo, run_git

logger = logging.getLogger(__name__)


def before_date_args(timestamp: str, ref: str) -> list[str]:
    """Arguments for ``git rev-list`` returning the newest first-parent commit not after ``timestamp``."""
    return ["-n", "1", "--first-parent", f"--before={timestamp}", ref]


class DateBasedCommitResolver:
    """Projects a point in time onto a registry's first-parent history.

    Date parsing and the "not after" comparison are git's own: the timestamp
    is handed to ``--before`` verbatim.
    """

    def resolve_before_or_at(self, mirror: HistoryMirror, timestamp: str) -> CommitRecord:
        repo = open_repo(mirror.source_name, mirror.path)
        commit = run_git(
            mirror.source_name,
            repo,
            "rev-list",
            *before_date_args(timestamp, mirror.remote_ref),
        )
        if not commit:
            raise NoCommitBeforeDateError(mirror.source_name, timestamp)

        record = CommitRecord(hash=commit, timestamp=commit_timestamp(mirror.source_name, repo, commit))
        logger.debug("%s at %s -> %s (%s)", mirror.source_name, timestamp, record.short_hash, record.timestamp)
        return record
