#!/usr/bin/env python3
"""
Tests for RepoSync configuration: environment variables, the repositories
file and startup validation.
"""

import json
import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent))

from reposync.config import (
    Config, load_configuration, load_repositories, parse_repositories, validate_configuration
)
from reposync.descriptor import RepositoryDescriptor
from reposync.errors import ConfigurationError
from reposync.platform import get_git_executable, get_platform_info, get_platform_specific_defaults
from sync_test_helpers import run_tests


def clean_environment(**values):
    """Environment patch with every REPOSYNC_* variable replaced by ``values``."""
    environment = {k: v for k, v in os.environ.items() if not k.startswith("REPOSYNC_")}
    environment.update(values)
    return patch.dict(os.environ, environment, clear=True)


def write_repositories(directory: Path, data) -> Path:
    path = directory / "repositories.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


def test_config_validation():
    print("Testing Config validation")
    print("-" * 40)

    with tempfile.TemporaryDirectory() as temp_dir:
        config = Config(base_path=Path(temp_dir) / "mirrors", log_level="debug")
        assert config.log_level == "DEBUG"
        assert config.base_path.is_absolute()
        assert config.max_workers == 8 and config.sync_on_start

        for kwargs in ({"log_level": "LOUD"}, {"max_workers": 0}, {"sync_interval_minutes": -1}):
            try:
                Config(base_path=Path(temp_dir), **kwargs)
                assert False, f"{kwargs} should be rejected"
            except ValueError:
                pass
    print("  ✓ Defaults applied, invalid values rejected")


def test_load_configuration_from_environment():
    print("Testing load_configuration")
    print("-" * 40)

    with tempfile.TemporaryDirectory() as temp_dir:
        with clean_environment(
            REPOSYNC_BASE_PATH=temp_dir,
            REPOSYNC_REPOSITORIES_FILE=str(Path(temp_dir) / "repos.json"),
            REPOSYNC_MAX_WORKERS="3",
            REPOSYNC_SYNC_ON_START="false",
            REPOSYNC_SYNC_INTERVAL_MINUTES="15",
            REPOSYNC_FORCE_ON_SCHEDULE="yes",
            REPOSYNC_LOG_LEVEL="warning",
        ):
            config = load_configuration()

        assert config.base_path == Path(temp_dir).resolve()
        assert config.repositories_file == (Path(temp_dir) / "repos.json").resolve()
        assert config.max_workers == 3
        assert config.sync_on_start is False
        assert config.sync_interval_minutes == 15
        assert config.force_on_schedule is True
        assert config.log_level == "WARNING"
    print("  ✓ All REPOSYNC_* variables honoured")


def test_load_configuration_defaults_and_errors():
    print("Testing load_configuration defaults")
    print("-" * 40)

    with clean_environment():
        config = load_configuration()
    assert config.repositories_file is None
    assert config.sync_on_start is True
    assert config.sync_interval_minutes == 0
    assert config.force_on_schedule is False
    assert config.base_path.name == "repositories"

    with clean_environment(REPOSYNC_MAX_WORKERS="many"):
        try:
            load_configuration()
            assert False, "Non-numeric max workers should fail"
        except ConfigurationError:
            pass
    print("  ✓ Defaults and ConfigurationError on bad values")


def test_parse_repositories():
    print("Testing parse_repositories")
    print("-" * 40)

    entries = [
        {"name": "GitHub", "host": "github.com", "organization": "acme", "repository": "svc-a"},
        {
            "name": "gitlab", "host": "gitlab.com", "organization": "acme", "repository": "svc-b",
            "branch": "develop", "protocol": "SSH",
        },
        {
            "name": "generic", "host": "git.acme.io", "organization": "acme", "repository": "svc-c",
            "auth": {"username": "ci", "token": "abc123"},
        },
    ]

    descriptors = parse_repositories({"repositories": entries})
    assert parse_repositories(entries) == descriptors, "Bare list and wrapped object are equivalent"

    first, second, third = descriptors
    assert isinstance(first, RepositoryDescriptor)
    assert first.name == "github" and first.branch == "main" and first.protocol == "https"
    assert first.auth is None
    assert second.branch == "develop" and second.protocol == "ssh"
    assert third.auth.username == "ci" and third.auth.token == "abc123"
    assert "abc123" not in repr(third), "Token must not appear in repr"

    for bad in ("svc-a", {"repos": []}, [42], [{"repository": "x", "auth": "ci:abc"}]):
        try:
            parse_repositories(bad)
            assert False, f"{bad!r} should be rejected"
        except ConfigurationError:
            pass
    print("  ✓ Entries parsed with defaults, malformed data rejected")


def test_load_repositories_file():
    print("Testing load_repositories")
    print("-" * 40)

    with tempfile.TemporaryDirectory() as temp_dir:
        directory = Path(temp_dir)
        path = write_repositories(directory, [
            {"name": "github", "host": "github.com", "organization": "acme", "repository": "svc-a"},
            {"name": "gitlab", "host": "gitlab.com", "organization": "acme", "repository": "svc-b"},
        ])
        config = Config(base_path=directory, repositories_file=path)
        assert [d.repository for d in load_repositories(config)] == ["svc-a", "svc-b"]

        assert load_repositories(Config(base_path=directory)) == []

        missing = Config(base_path=directory, repositories_file=directory / "missing.json")
        try:
            load_repositories(missing)
            assert False, "Missing file should fail"
        except ConfigurationError as e:
            assert "not found" in str(e)

        write_repositories(directory, "{not json")
        try:
            load_repositories(config)
            assert False, "Invalid JSON should fail"
        except ConfigurationError as e:
            assert "Invalid JSON" in str(e)
    print("  ✓ File loaded, missing and invalid files reported")


def test_duplicate_repositories_in_file():
    print("Testing duplicate entries")
    print("-" * 40)

    with tempfile.TemporaryDirectory() as temp_dir:
        directory = Path(temp_dir)
        path = write_repositories(directory, [
            {"name": "github", "host": "github.com", "organization": "acme", "repository": "svc-a"},
            {"name": "gitlab", "host": "gitlab.com", "organization": "other", "repository": "SVC-A"},
        ])

        try:
            load_repositories(Config(base_path=directory, repositories_file=path))
            assert False, "Entries sharing a directory should be rejected"
        except ConfigurationError as e:
            assert "share the local directory" in str(e)
    print("  ✓ Directory collision rejected")


def test_validate_configuration():
    print("Testing validate_configuration")
    print("-" * 40)

    with tempfile.TemporaryDirectory() as temp_dir:
        directory = Path(temp_dir)
        path = write_repositories(directory, [])

        with patch("reposync.config.validate_git_availability", return_value=(True, None)):
            config = Config(base_path=directory / "mirrors", repositories_file=path)
            assert validate_configuration(config) == []
            assert (directory / "mirrors").is_dir(), "Base path is created"

            issues = validate_configuration(Config(base_path=directory, max_workers=64))
            assert any(i.startswith("WARNING") and "REPOSYNC_REPOSITORIES_FILE" in i for i in issues)
            assert any(i.startswith("WARNING") and "max_workers" in i for i in issues)
            assert not any(i.startswith("ERROR") for i in issues)

            missing = Config(base_path=directory, repositories_file=directory / "missing.json")
            assert any(i.startswith("ERROR") for i in validate_configuration(missing))

        with patch("reposync.config.validate_git_availability",
                   return_value=(False, "Git executable 'git' not found")):
            issues = validate_configuration(Config(base_path=directory, repositories_file=path))
            assert issues == ["ERROR: Git executable 'git' not found"], issues
    print("  ✓ Errors and warnings reported")


def test_platform_defaults():
    print("Testing platform defaults")
    print("-" * 40)

    for system, workers, executable in (("Linux", 8, "git"), ("Windows", 4, "git.exe")):
        with patch("reposync.platform._platform_info", None), \
                patch("reposync.platform.platform.system", return_value=system):
            assert get_platform_info().is_windows is (system == "Windows")
            assert get_platform_specific_defaults()["max_workers"] == workers
            assert get_git_executable() == executable
    print("  ✓ Worker count and git executable follow the platform")


def run_all_tests():
    return run_tests("Configuration Test Suite", [
        test_config_validation,
        test_load_configuration_from_environment,
        test_load_configuration_defaults_and_errors,
        test_parse_repositories,
        test_load_repositories_file,
        test_duplicate_repositories_in_file,
        test_validate_configuration,
        test_platform_defaults,
    ])


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
