"""Shared fakes for RepoSync tests: an in-memory git backend and log capture."""

import io
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from git import GitCommandError, InvalidGitRepositoryError

from reposync.descriptor import RepositoryAuth, RepositoryDescriptor
from reposync.logging_config import CredentialMaskingFilter


def make_descriptor(
    repository: str = "svc-a",
    organization: str = "acme",
    host: str = "git.acme.io",
    name: str = "generic",
    branch: str = "main",
    auth: Optional[Tuple[str, str]] = ("ci", "abc123"),
    protocol: str = "https"
) -> RepositoryDescriptor:
    """Create a test descriptor; pass auth=None for a public repository."""
    return RepositoryDescriptor(
        name=name,
        host=host,
        organization=organization,
        repository=repository,
        branch=branch,
        protocol=protocol,
        auth=RepositoryAuth(*auth) if auth else None,
    )


def git_error(command: str, stderr: str) -> GitCommandError:
    return GitCommandError(["git"] + command.split(), 128, stderr=stderr)


class FakeGitBackend:
    """
    Records every git call made through its clients.

    Directories listed in ``working_copies`` answer the status probe; a
    successful clone adds its target. Failures are registered per
    (directory, operation).
    """

    def __init__(self, working_copies=()):
        self.working_copies = {Path(p) for p in working_copies}
        self.failures: Dict[Tuple[Path, str], Exception] = {}
        self.calls: List[Tuple[str, Path, tuple]] = []
        self.hooks: Dict[str, object] = {}
        self._lock = threading.Lock()

    def fail(self, path, operation: str, error: Exception) -> None:
        self.failures[(Path(path), operation)] = error

    def corrupt(self, path) -> None:
        """Make the status probe of ``path`` error out like a damaged repository."""
        self.fail(path, "status", git_error("status", "fatal: bad object HEAD"))

    def client(self, path) -> "FakeGitClient":
        return FakeGitClient(self, Path(path))

    def record(self, operation: str, path: Path, args: tuple) -> None:
        with self._lock:
            self.calls.append((operation, path, args))
        hook = self.hooks.get(operation)
        if hook:
            hook(path, args)
        error = self.failures.get((path, operation))
        if error is not None:
            raise error

    def operations(self, path=None) -> List[str]:
        """Names of the operations run, optionally only those against ``path``."""
        with self._lock:
            return [op for op, p, _ in self.calls if path is None or p == Path(path)]

    def calls_for(self, operation: str) -> List[Tuple[Path, tuple]]:
        with self._lock:
            return [(p, args) for op, p, args in self.calls if op == operation]


class FakeGitClient:
    """Stands in for reposync.git_sync.client.GitClient."""

    def __init__(self, backend: FakeGitBackend, working_dir: Path):
        self.backend = backend
        self.working_dir = working_dir

    def status(self) -> None:
        self.backend.record("status", self.working_dir, ())
        if self.working_dir not in self.backend.working_copies:
            raise InvalidGitRepositoryError(str(self.working_dir))

    def clone(self, url: str, target_dir: str, branch: str) -> None:
        target = self.working_dir / target_dir
        self.backend.record("clone", target, (url, target_dir, branch))
        self.backend.working_copies.add(target)

    def pull(self, remote: str, branch: str) -> None:
        self.backend.record("pull", self.working_dir, (remote, branch))

    def fetch(self, *flags: str) -> None:
        self.backend.record("fetch", self.working_dir, flags)

    def reset(self, *flags: str) -> None:
        self.backend.record("reset", self.working_dir, flags)


@contextmanager
def capture_logs(logger_name: str = "reposync", level: int = logging.DEBUG, masked: bool = True):
    """Collect the output of ``logger_name`` (and its children) in a StringIO."""
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))
    if masked:
        handler.addFilter(CredentialMaskingFilter())

    logger = logging.getLogger(logger_name)
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(level)
    try:
        yield stream
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


def run_tests(title: str, tests) -> bool:
    """Run plain test functions, reporting passes and failures."""
    print(title)
    print("=" * 60)

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
            print("  PASSED\n")
        except Exception as e:
            failed += 1
            print(f"  ✗ {test.__name__} failed: {type(e).__name__}: {e}\n")

    print("=" * 60)
    print(f"Test Results: {passed} passed, {failed} failed")

    if failed == 0:
        print("All tests passed! ✓")
        return True
    print(f"{failed} test(s) failed! ✗")
    return False
