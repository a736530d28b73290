"""Fixtures: small git-backed registries with hand-picked commit dates."""

from __future__ import annotations

import uuid as uuidlib
from pathlib import Path

import pytest
from git import Repo

from rtt.models import RegistrySource


class FakeRegistry:
    """A local registry repository whose history we write commit by commit."""

    def __init__(self, root: Path, name: str):
        self.name = name
        self.path = root / f"{name}-upstream"
        self.uuid = str(uuidlib.uuid5(uuidlib.NAMESPACE_URL, name))
        self.packages: dict[str, dict] = {}  # name -> {"uuid", "path", "versions"}
        self.repo = Repo.init(self.path, initial_branch="main")
        with self.repo.config_writer() as cw:
            cw.set_value("user", "name", "Registrator")
            cw.set_value("user", "email", "registrator@example.com")
            cw.set_value("commit", "gpgsign", "false")

    @property
    def source(self) -> RegistrySource:
        return RegistrySource(name=self.name, url=str(self.path))

    def commit(self, message: str, date: str) -> str:
        """Rewrite the registry files and commit them at ``date``."""
        self._write_files()
        self.repo.git.add(A=True)
        self.repo.git.commit(
            "--allow-empty",
            "-m",
            message,
            env={"GIT_AUTHOR_DATE": date, "GIT_COMMITTER_DATE": date},
        )
        return self.repo.head.commit.hexsha

    def release(self, package: str, version: str, date: str) -> str:
        """Commit a release the way registry bots word it."""
        kind = "version" if package in self.packages else "package"
        if kind == "package":
            self.packages[package] = {
                "uuid": str(uuidlib.uuid5(uuidlib.NAMESPACE_URL, f"{self.name}/{package}")),
                "path": f"{package[0].upper()}/{package}",
                "versions": [],
            }
        self.packages[package]["versions"].append(version)
        return self.commit(f"New {kind}: {package} v{version}\n\nUUID: {self.packages[package]['uuid']}", date)

    def _write_files(self) -> None:
        lines = [
            f'name = "{self.name}"',
            f'uuid = "{self.uuid}"',
            f'repo = "{self.path}"',
            "",
            "[packages]",
        ]
        for name, info in sorted(self.packages.items()):
            lines.append(f'{info["uuid"]} = {{ name = "{name}", path = "{info["path"]}" }}')
            pkg_dir = self.path / info["path"]
            pkg_dir.mkdir(parents=True, exist_ok=True)
            (pkg_dir / "Package.toml").write_text(
                f'name = "{name}"\nuuid = "{info["uuid"]}"\n'
            )
            versions = "".join(
                f'["{v}"]\ngit-tree-sha1 = "{"0" * 40}"\n\n' for v in info["versions"]
            )
            (pkg_dir / "Versions.toml").write_text(versions)
        (self.path / "Registry.toml").write_text("\n".join(lines) + "\n")


@pytest.fixture
def make_registry(tmp_path):
    def _make(name: str) -> FakeRegistry:
        return FakeRegistry(tmp_path / "upstream", name)

    return _make


@pytest.fixture
def registries_dir(tmp_path) -> Path:
    return tmp_path / "registries"


@pytest.fixture
def main_and_extra(make_registry):
    """The json-lib scenario: Main publishes 1.9.3 on 2023-05-01, Extra has two older commits."""
    main = make_registry("Main")
    main.commit("Initial registry", "2023-01-01T00:00:00+0000")
    main.release("json-lib", "1.9.0", "2023-02-01T09:00:00+0000")
    main.release("json-lib", "1.9.3", "2023-05-01T10:00:00+0000")
    main.release("json-lib", "1.10.0", "2023-06-01T12:00:00+0000")

    extra = make_registry("Extra")
    extra.commit("Initial registry", "2023-03-01T00:00:00+0000")
    extra.release("yaml-lib", "0.1.0", "2023-04-15T00:00:00+0000")
    return main, extra
