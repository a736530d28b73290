"""Error taxonomy for registry time travel.

Every error carries enough context (registry name, package, timestamp) to
diagnose a failed run without re-running it with verbose output.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from git import GitCommandError


class ExitCode(IntEnum):
    """CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1  # Bad config file or no registries configured
    NOT_FOUND = 2  # Package version or historical commit not found
    FATAL_ERROR = 3  # Unexpected crash
    GIT_ERROR = 4  # Git process or transfer failed


class TimeTravelError(Exception):
    """Base exception for rtt errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": int(self.exit_code),
            **self.context,
        }


class ConfigError(TimeTravelError):
    """Configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class CloneError(TimeTravelError):
    """A git process (clone, fetch, checkout, log query) failed."""

    exit_code = ExitCode.GIT_ERROR

    def __init__(
        self,
        source_name: str,
        message: str,
        command: str | None = None,
        stderr: str | None = None,
    ):
        super().__init__(
            f"{message} (registry {source_name})",
            source_name=source_name,
            command=command,
            stderr=stderr,
        )
        self.source_name = source_name
        self.command = command
        self.stderr = stderr

    @classmethod
    def from_git(cls, source_name: str, message: str, exc: GitCommandError) -> "CloneError":
        command = exc.command if isinstance(exc.command, str) else " ".join(map(str, exc.command))
        stderr = exc.stderr.strip() if isinstance(exc.stderr, str) else str(exc.stderr or "")
        return cls(source_name, f"{message}: {stderr or exc.status}", command=command, stderr=stderr)


class PackageNotFoundError(TimeTravelError):
    """No registry history holds a release event for the package version."""

    exit_code = ExitCode.NOT_FOUND

    def __init__(self, name: str, version: str, registries: str | list[str]):
        if isinstance(registries, str):
            registries = [registries]
        super().__init__(
            f"could not find package {name} {version} in history of "
            f"registr{'y' if len(registries) == 1 else 'ies'} {', '.join(registries)}",
            package=name,
            version=version,
            registries=list(registries),
        )
        self.name = name
        self.version = version
        self.registries = list(registries)


class NoCommitBeforeDateError(TimeTravelError):
    """A registry's history starts after the requested timestamp."""

    exit_code = ExitCode.NOT_FOUND

    def __init__(self, source_name: str, timestamp: str):
        super().__init__(
            f"found no commit in registry {source_name} before {timestamp}",
            source_name=source_name,
            timestamp=timestamp,
        )
        self.source_name = source_name
        self.timestamp = timestamp


class RegistryLoadError(TimeTravelError):
    """A snapshot directory does not hold a readable registry."""

    exit_code = ExitCode.FATAL_ERROR

    def __init__(self, path: str, message: str):
        super().__init__(f"{message}: {path}", path=path)
        self.path = path
