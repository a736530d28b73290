"""Git operations: clone, query history, pin working trees."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from rtt.errors import CloneError

logger = logging.getLogger(__name__)


@contextmanager
def working_directory(path: str | Path) -> Iterator[Path]:
    """Temporarily change the process working directory.

    The previous directory is restored on every exit path::

        with working_directory(depot) as cwd:
            run_things_relative_to(cwd)
        # back where we started, even if run_things_relative_to raised
    """
    previous = Path.cwd()
    target = Path(path).resolve()
    os.chdir(target)
    try:
        yield target
    finally:
        os.chdir(previous)


def clone(source_name: str, url: str, dest: Path, **options) -> Repo:
    """Clone ``url`` into ``dest``; ``options`` become ``git clone`` flags.

    A failed transfer leaves whatever ``git`` already wrote in ``dest``.
    """
    logger.debug("git clone %s %s %s", _flags(options), url, dest)
    try:
        return Repo.clone_from(url, dest, **options)
    except GitCommandError as e:
        raise CloneError.from_git(source_name, f"failed to clone {url}", e) from e


def open_repo(source_name: str, path: Path) -> Repo:
    """Open an existing local repository."""
    try:
        return Repo(path)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise CloneError(source_name, f"not a git repository: {path}") from e


def run_git(source_name: str, repo: Repo, command: str, *args: str) -> str:
    """Run ``git <command> <args...>`` inside ``repo`` and return stripped stdout."""
    logger.debug("git %s %s (in %s)", command, " ".join(args), repo.working_dir)
    try:
        return getattr(repo.git, command.replace("-", "_"))(*args).strip()
    except GitCommandError as e:
        raise CloneError.from_git(source_name, f"git {command} failed", e) from e


def commit_timestamp(source_name: str, repo: Repo, commit: str) -> str:
    """Return the commit date of ``commit`` with its original offset.

    Uses ``%ci`` so the value is exactly what ``--before`` compares against.
    """
    return run_git(source_name, repo, "show", "-s", "--format=%ci", commit)


def head_commit(path: Path) -> str | None:
    """Return the checked-out commit of a local repo, or None if unreadable."""
    try:
        return Repo(path).head.commit.hexsha
    except (InvalidGitRepositoryError, NoSuchPathError, ValueError):
        return None


def _flags(options: dict) -> str:
    parts = []
    for key, value in options.items():
        flag = "--" + key.replace("_", "-")
        parts.append(flag if value is True else f"{flag}={value}")
    return " ".join(parts)
