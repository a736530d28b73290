"""Configuration for registry time travel.

Values come from, highest priority first: an explicit YAML file (``--config``
or ``RTT_CONFIG``), environment variables, then defaults.

Example ``rtt.yaml``::

    registries_dir: ./registries
    snapshot_layout: by-commit
    registries:
      - name: General
        url: https://github.com/JuliaRegistries/General.git
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

import yaml

from rtt.errors import ConfigError
from rtt.models import RegistrySource, SnapshotLayout

CONFIG_ENV = "RTT_CONFIG"
REGISTRIES_DIR_ENV = "RTT_REGISTRIES_DIR"
SNAPSHOT_LAYOUT_ENV = "RTT_SNAPSHOT_LAYOUT"
DEPOT_PATH_ENVS = ("RTT_DEPOT_PATH", "JULIA_DEPOT_PATH")


def default_registries_dir() -> Path:
    return Path.cwd() / "registries"


def default_depot_paths() -> list[Path]:
    return [Path.home() / ".julia"]


@dataclass
class Settings:
    """Resolved settings for one run."""

    registries_dir: Path = field(default_factory=default_registries_dir)
    depot_paths: list[Path] = field(default_factory=default_depot_paths)
    snapshot_layout: SnapshotLayout = SnapshotLayout.BY_NAME
    remote_ref: str = "origin"
    registries: list[RegistrySource] = field(default_factory=list)
    """Explicit registries; when empty the depots are scanned instead."""

    def sources(self) -> list[RegistrySource]:
        """Registries to travel with, in order."""
        if self.registries:
            return list(self.registries)

        from rtt.registry.discovery import discover_registries

        found = discover_registries(self.depot_paths)
        if not found:
            depots = ", ".join(str(d) for d in self.depot_paths)
            raise ConfigError(f"no registries configured and none found in depots: {depots}")
        return found


def load_settings(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Build ``Settings`` from defaults, the environment and an optional YAML file."""
    env = os.environ if env is None else env
    settings = Settings()

    if env.get(REGISTRIES_DIR_ENV):
        settings.registries_dir = Path(env[REGISTRIES_DIR_ENV]).expanduser()
    if env.get(SNAPSHOT_LAYOUT_ENV):
        settings.snapshot_layout = parse_layout(env[SNAPSHOT_LAYOUT_ENV])
    for var in DEPOT_PATH_ENVS:
        if env.get(var):
            settings.depot_paths = [
                Path(p).expanduser() for p in env[var].split(os.pathsep) if p
            ]
            break

    config_path = config_path or env.get(CONFIG_ENV)
    if config_path:
        _apply_file(settings, Path(config_path))

    return settings


def parse_layout(value: str) -> SnapshotLayout:
    try:
        return SnapshotLayout(value)
    except ValueError:
        choices = ", ".join(l.value for l in SnapshotLayout)
        raise ConfigError(f"unknown snapshot layout {value!r} (expected one of: {choices})")


def parse_registry(spec: str) -> RegistrySource:
    """Parse a ``NAME=URL`` command-line registry spec."""
    name, sep, url = spec.partition("=")
    if not sep or not name or not url:
        raise ConfigError(f"registry must be given as NAME=URL, got {spec!r}")
    return RegistrySource(name=name.strip(), url=url.strip())


def _apply_file(settings: Settings, path: Path) -> None:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    if "registries_dir" in data:
        settings.registries_dir = Path(data["registries_dir"]).expanduser()
    if "snapshot_layout" in data:
        settings.snapshot_layout = parse_layout(data["snapshot_layout"])
    if "remote_ref" in data:
        settings.remote_ref = str(data["remote_ref"])
    if "depot_paths" in data:
        depot_paths = data["depot_paths"] or []
        if not isinstance(depot_paths, list):
            raise ConfigError(f"depot_paths in {path} must be a list")
        settings.depot_paths = [Path(p).expanduser() for p in depot_paths]

    registries = data.get("registries") or []
    if not isinstance(registries, list):
        raise ConfigError(f"registries in {path} must be a list")

    sources = []
    seen = set()
    for item in registries:
        if not isinstance(item, dict) or not item.get("name") or not item.get("url"):
            raise ConfigError(f"each registry in {path} needs a name and a url")
        if item["name"] in seen:
            raise ConfigError(f"duplicate registry name {item['name']!r} in {path}")
        seen.add(item["name"])
        sources.append(RegistrySource(name=item["name"], url=item["url"]))
    if sources:
        settings.registries = sources
