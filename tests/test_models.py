"""Tests for data models, detectors and errors."""

from datetime import datetime, timedelta, timezone

from git import GitCommandError

from rtt.errors import (
    CloneError,
    ExitCode,
    NoCommitBeforeDateError,
    PackageNotFoundError,
)
from rtt.history.detectors import GENERAL_REGISTRY
from rtt.models import CommitRecord, PackageReference, TravelPlan, RegistrySource


def test_package_reference_strips_v():
    ref = PackageReference(name="JSON3", version="v1.9.3")
    assert ref.version == "1.9.3"
    assert ref.tagged_version == "v1.9.3"
    assert ref.qualified_id == "JSON3@1.9.3"
    assert ref == PackageReference(name="JSON3", version="1.9.3")


def test_commit_record_parses_git_dates():
    record = CommitRecord(hash="a" * 40, timestamp="2023-05-01 12:00:00 +0200")
    assert record.short_hash == "a" * 10
    assert record.as_datetime() == datetime(2023, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert record.as_datetime().utcoffset() == timedelta(hours=2)


def test_commit_record_parses_iso_dates():
    record = CommitRecord(hash="b" * 40, timestamp="2023-05-01T10:00:00+00:00")
    assert record.as_datetime() == datetime(2023, 5, 1, 10, 0, tzinfo=timezone.utc)


def test_travel_plan_lookup():
    source = RegistrySource(name="General", url="https://example.com/General.git")
    commit = CommitRecord(hash="c" * 40, timestamp="2023-05-01 10:00:00 +0000")
    plan = TravelPlan(
        package=PackageReference("JSON", "0.21.4"),
        release_registry=source,
        release=commit,
        pins=[(source, commit)],
    )
    assert plan.release_date == commit.timestamp
    assert plan.commit_for("General") is commit
    assert plan.commit_for("Other") is None


# --- Detectors ---


def test_general_registry_patterns():
    patterns = GENERAL_REGISTRY.patterns(PackageReference("JSON", "0.21.4"))
    assert patterns == ["New version: JSON v0.21.4", "New package: JSON v0.21.4"]


def test_general_registry_parse():
    assert GENERAL_REGISTRY.parse("New version: JSON v0.21.4") == ("JSON", "0.21.4")
    assert GENERAL_REGISTRY.parse("New package: JSON3 v0.1.0\n\n- Registering package: JSON3") == (
        "JSON3",
        "0.1.0",
    )
    assert GENERAL_REGISTRY.parse("Merge pull request #1 from foo/bar") is None
    assert GENERAL_REGISTRY.parse("New version: JSON v0.21.4 (retry)") is None
    assert GENERAL_REGISTRY.parse("") is None


# --- Errors ---


def test_package_not_found_context():
    err = PackageNotFoundError("JSON", "0.21.4", ["General", "Extra"])
    assert "General, Extra" in str(err)
    assert err.exit_code == ExitCode.NOT_FOUND
    data = err.to_dict()
    assert data["error"] == "PackageNotFoundError"
    assert data["package"] == "JSON"
    assert data["registries"] == ["General", "Extra"]


def test_package_not_found_single_registry():
    err = PackageNotFoundError("JSON", "0.21.4", "General")
    assert err.registries == ["General"]
    assert "registry General" in str(err)


def test_no_commit_before_date_context():
    err = NoCommitBeforeDateError("Extra", "2021-06-01 00:00:00 +0000")
    assert err.to_dict()["timestamp"] == "2021-06-01 00:00:00 +0000"
    assert "Extra" in err.message


def test_clone_error_from_git():
    git_error = GitCommandError(["git", "clone", "nowhere"], 128, b"fatal: repository not found")
    err = CloneError.from_git("General", "failed to clone nowhere", git_error)
    assert err.source_name == "General"
    assert err.command == "git clone nowhere"
    assert "repository not found" in err.stderr
    assert err.exit_code == ExitCode.GIT_ERROR
