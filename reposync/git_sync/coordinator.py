"""Concurrent synchronization of the whole configured repository set."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..descriptor import RepositoryDescriptor, validate_unique_repositories
from ..errors import ConfigurationError, RepoSyncError, SyncFailure
from ..url_builders import get_builder
from .outcome import SyncOutcome, SyncReport, SyncState
from .synchronizer import ClientFactory, RepositorySynchronizer

DEFAULT_MAX_WORKERS = 8


class SyncCoordinator:
    """
    Fans synchronization out over every configured repository.

    Each repository gets its own synchronizer (its own directory and git
    client), all run in a thread pool, and the coordinator waits for every
    one of them before reporting. A failing repository never cancels its
    siblings.
    """

    def __init__(
        self,
        descriptors: Sequence[RepositoryDescriptor],
        base_path: Union[str, Path],
        max_workers: Optional[int] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        self.logger = logging.getLogger('reposync.git_sync.coordinator')
        validate_unique_repositories(descriptors)

        self.descriptors = tuple(descriptors)
        self.base_path = Path(base_path)
        self.max_workers = max_workers
        self.client_factory = client_factory

    def _create_synchronizer(self, descriptor: RepositoryDescriptor) -> RepositorySynchronizer:
        return RepositorySynchronizer(
            descriptor,
            get_builder(descriptor.name),
            self.base_path,
            client_factory=self.client_factory
        )

    def _run(self, descriptor: RepositoryDescriptor, force: bool) -> SyncOutcome:
        """Synchronize one repository, turning any failure into a failed outcome."""
        started = time.monotonic()
        name = descriptor.repository or descriptor.display_name

        try:
            synchronizer = self._create_synchronizer(descriptor)
        except (RepoSyncError, OSError) as e:
            self.logger.error(f"Cannot prepare repository {descriptor.display_name}: {e}")
            return SyncOutcome.failed(
                name, "validate", e, state=SyncState.UNKNOWN,
                duration=time.monotonic() - started
            )

        try:
            return synchronizer.force_sync() if force else synchronizer.sync()
        except SyncFailure as e:
            return SyncOutcome.failed(name, e.operation, e, duration=time.monotonic() - started)

    def _worker_count(self, task_count: int) -> int:
        limit = self.max_workers or DEFAULT_MAX_WORKERS
        return max(1, min(limit, task_count))

    def _run_all(self, descriptors: Sequence[RepositoryDescriptor], force: bool) -> List[SyncOutcome]:
        with ThreadPoolExecutor(
            max_workers=self._worker_count(len(descriptors)),
            thread_name_prefix="reposync"
        ) as executor:
            futures = [executor.submit(self._run, descriptor, force) for descriptor in descriptors]
        # Leaving the executor waits for every task; results keep configuration order
        return [future.result() for future in futures]

    def sync_all(self, force: bool = False, raise_on_failure: bool = False) -> SyncReport:
        """
        Synchronize every configured repository concurrently.

        Returns one outcome per repository. With ``raise_on_failure`` a
        SyncAggregateError carrying the report is raised, but only after all
        repositories have settled.
        """
        mode = "forced " if force else ""
        self.logger.info(f"Starting {mode}repository synchronization of {len(self.descriptors)} repositories...")
        started = time.monotonic()

        outcomes = self._run_all(self.descriptors, force) if self.descriptors else []
        report = SyncReport(outcomes=outcomes, forced=force, duration=time.monotonic() - started)

        self.logger.info(
            f"Repository synchronization completed: {len(report.succeeded)}/{len(outcomes)} "
            f"succeeded in {report.duration:.2f}s"
        )
        for outcome in report.failed:
            self.logger.warning(f"Repository {outcome.repository} failed ({outcome.operation}): {outcome.message}")

        if raise_on_failure:
            report.raise_for_failures()
        return report

    def find(self, repository: str) -> RepositoryDescriptor:
        """Configured descriptor named ``repository``."""
        for descriptor in self.descriptors:
            if descriptor.repository == repository:
                return descriptor
        raise ConfigurationError(f"Repository '{repository}' is not configured")

    def sync_one(self, repository: str, force: bool = False) -> SyncOutcome:
        """Synchronize a single configured repository."""
        descriptor = self.find(repository)
        self.logger.info(f"Starting {'forced ' if force else ''}synchronization of {descriptor.display_name}")
        return self._run(descriptor, force)

    def create_synchronizer(self, repository: str) -> RepositorySynchronizer:
        """Build the synchronizer of a configured repository, e.g. to inspect its state."""
        return self._create_synchronizer(self.find(repository))


__all__ = ['SyncCoordinator', 'DEFAULT_MAX_WORKERS']
