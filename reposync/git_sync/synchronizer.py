"""Synchronization of one repository with its local mirror."""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from ..descriptor import RepositoryDescriptor, validate_repository
from ..errors import ForceSyncFailure, SyncFailure, describe_cause
from ..logging_config import mask_credentials
from ..url_builders import RepositoryUrlBuilder, build_repository_url
from .client import GitClient
from .outcome import SyncOutcome, SyncState
from .paths import ensure_directory, get_mirror_path
from .performance_logger import time_operation

DEFAULT_REMOTE = "origin"

ClientFactory = Callable[[Path], GitClient]


class RepositorySynchronizer:
    """
    Keeps one local mirror in step with its remote repository.

    Construction validates the descriptor, builds the fetch URL and makes
    sure the mirror directory exists, so no git command can run against a
    half-configured repository. ``sync()`` then pulls an existing working
    copy or clones a fresh one; ``force_sync()`` discards local divergence
    with fetch + hard reset before pulling.
    """

    def __init__(
        self,
        descriptor: RepositoryDescriptor,
        url_builder: RepositoryUrlBuilder,
        base_path: Union[str, Path],
        client_factory: Optional[ClientFactory] = None
    ):
        self.logger = logging.getLogger('reposync.git_sync.synchronizer')
        self.descriptor = descriptor
        self.base_path = Path(base_path)
        self.state = SyncState.UNKNOWN

        validate_repository(descriptor)
        self.fetch_url = build_repository_url(descriptor, url_builder)
        self.mirror_path = ensure_directory(get_mirror_path(self.base_path, descriptor.repository))

        client_factory = client_factory or GitClient
        self.git = client_factory(self.mirror_path)
        # Clones run from the base path into the repository's directory
        self.parent_git = client_factory(self.base_path)

    @property
    def repository(self) -> str:
        return self.descriptor.repository

    @property
    def branch(self) -> str:
        return self.descriptor.branch

    @property
    def masked_url(self) -> str:
        return mask_credentials(self.fetch_url)

    def is_git_repository(self) -> bool:
        """Lightweight status probe of the local mirror."""
        try:
            self.git.status()
            return True
        except Exception as e:
            self.logger.debug(
                f"{self.repository} is not a usable working copy: {mask_credentials(describe_cause(e))}"
            )
            return False

    def _detect_state(self) -> SyncState:
        self.state = SyncState.EXISTING_CLONE if self.is_git_repository() else SyncState.NO_CLONE
        return self.state

    def pull(self) -> None:
        self.logger.debug(f"Pulling repository: {self.repository}")
        self.git.pull(DEFAULT_REMOTE, self.branch)

    def clone(self) -> None:
        validate_repository(self.descriptor)

        self.logger.debug(f"Cloning repository: {self.repository}")
        self.logger.debug(f"Cloning from URL: {self.masked_url}")
        self.parent_git.clone(self.fetch_url, self.repository, self.branch)

    def _force_pull(self) -> None:
        self.logger.debug(f"Force syncing repository: {self.repository}")
        self.git.fetch("--all", "--prune")
        self.git.reset("--hard", f"{DEFAULT_REMOTE}/{self.branch}")
        self.git.pull(DEFAULT_REMOTE, self.branch)

    def sync(self) -> SyncOutcome:
        """Pull the existing working copy, or clone it if there is none."""
        operation = "pull" if self._detect_state() is SyncState.EXISTING_CLONE else "clone"

        try:
            with time_operation(f"{operation} {self.repository}", self.logger) as timer:
                if operation == "pull":
                    self.pull()
                else:
                    self.clone()
        except Exception as e:
            self.state = SyncState.FAILED
            self.logger.error(
                f"Error syncing repository {self.descriptor.display_name}: "
                f"{mask_credentials(describe_cause(e))}"
            )
            raise SyncFailure(self.repository, operation, e) from e

        self.state = SyncState.SYNCED
        self.logger.info(f"Repository {self.descriptor.display_name} synced ({operation})")
        return SyncOutcome.succeeded(self.repository, operation, timer.duration)

    def force_sync(self) -> SyncOutcome:
        """
        Resynchronize discarding local divergence.

        An existing working copy is fetched (all remotes, pruned), hard reset
        to ``origin/<branch>`` and pulled; a failing step stops the sequence.
        Without a working copy this clones like ``sync()``.
        """
        operation = "force_pull" if self._detect_state() is SyncState.EXISTING_CLONE else "clone"

        try:
            with time_operation(f"{operation} {self.repository}", self.logger) as timer:
                if operation == "force_pull":
                    self._force_pull()
                else:
                    self.clone()
        except Exception as e:
            self.state = SyncState.FAILED
            self.logger.error(
                f"Error force syncing repository {self.descriptor.display_name}: "
                f"{mask_credentials(describe_cause(e))}"
            )
            raise ForceSyncFailure(self.repository, operation, e) from e

        self.state = SyncState.SYNCED
        self.logger.info(f"Repository {self.descriptor.display_name} force synced ({operation})")
        return SyncOutcome.succeeded(self.repository, operation, timer.duration)
