"""Git synchronization of local repository mirrors."""

from .client import GitClient
from .coordinator import SyncCoordinator
from .error_types import SyncErrorCategory, categorize_git_error
from .outcome import SyncOutcome, SyncReport, SyncState
from .paths import ensure_directory, get_mirror_path
from .synchronizer import RepositorySynchronizer

__all__ = [
    'GitClient',
    'SyncCoordinator',
    'RepositorySynchronizer',
    'SyncOutcome',
    'SyncReport',
    'SyncState',
    'SyncErrorCategory',
    'categorize_git_error',
    'ensure_directory',
    'get_mirror_path',
]
