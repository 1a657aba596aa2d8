"""
RepoSync - keeps a configured set of git repositories mirrored on local disk.

Each repository's fetch URL is built from its descriptor (provider, host,
organization, repository, optional credentials); mirrors are cloned when
missing and pulled (or hard reset) when present.
"""

__version__ = "1.0.0"
__description__ = "Mirror configured git repositories onto local disk"

from .descriptor import RepositoryAuth, RepositoryDescriptor, validate_repository
from .git_sync import RepositorySynchronizer, SyncCoordinator, SyncOutcome, SyncReport

__all__ = [
    "RepositoryAuth",
    "RepositoryDescriptor",
    "RepositorySynchronizer",
    "SyncCoordinator",
    "SyncOutcome",
    "SyncReport",
    "validate_repository",
]
