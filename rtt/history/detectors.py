"""Release-event detectors.

A registry records each publication as a commit with a structured message.
A detector knows one registry tooling's wording: it produces the message
patterns to search history for, and parses a commit subject back into the
package and version it announces.
"""

from __future__ import annotations

import re
from typing import Protocol

from rtt.models import PackageReference


class ReleaseEventDetector(Protocol):
    """Capability: turn a commit message into ``(package, version)``, if any."""

    def patterns(self, package: PackageReference) -> list[str]:
        """Literal message fragments to search for, in priority order."""
        ...

    def parse(self, message: str) -> tuple[str, str] | None:
        """Return ``(name, version)`` announced by ``message``, or None."""
        ...


class StructuredMessageDetector:
    """Detects ``<prefix>: <name> v<version>`` subjects.

    Anything after the version and a space is ignored, such as the
    ``(#85123)`` GitHub appends to squash-merged pull requests.

    ``kinds`` lists the event words in search order; the first one is the
    regular version bump, later ones are fallbacks such as the commit that
    first registers a package.
    """

    def __init__(self, kinds: tuple[str, ...] = ("version", "package"), prefix: str = "New"):
        self.kinds = kinds
        self.prefix = prefix
        alternatives = "|".join(re.escape(k) for k in kinds)
        self._regex = re.compile(
            rf"^{re.escape(prefix)} (?:{alternatives}): (?P<name>\S+) v(?P<version>\S+)(?:\s.*)?$"
        )

    def patterns(self, package: PackageReference) -> list[str]:
        return [
            f"{self.prefix} {kind}: {package.name} {package.tagged_version}"
            for kind in self.kinds
        ]

    def parse(self, message: str) -> tuple[str, str] | None:
        subject = message.strip().splitlines()[0] if message.strip() else ""
        match = self._regex.match(subject)
        if not match:
            return None
        return match.group("name"), match.group("version")


# Wording used by the General registry's bot and by LocalRegistry-managed
# registries: "New version: JSON v0.21.4" / "New package: JSON3 v0.1.0".
GENERAL_REGISTRY = StructuredMessageDetector()
