"""Categorization of git failures for sync outcome reports."""

from enum import Enum
from typing import Dict, Optional


class SyncErrorCategory(Enum):
    """Categories of git sync failures, for operators reading a report."""
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    REPOSITORY_ACCESS = "repository_access"
    BRANCH = "branch"
    MERGE_CONFLICT = "merge_conflict"
    REPOSITORY_CORRUPTION = "repository_corruption"
    LOCAL_STATE = "local_state"
    UNKNOWN = "unknown"


# Checked in insertion order; the first matching pattern wins
ERROR_PATTERNS: Dict[str, SyncErrorCategory] = {
    # Network errors
    "could not resolve host": SyncErrorCategory.NETWORK,
    "failed to connect": SyncErrorCategory.NETWORK,
    "couldn't connect to server": SyncErrorCategory.NETWORK,
    "connection refused": SyncErrorCategory.NETWORK,
    "network is unreachable": SyncErrorCategory.NETWORK,
    "connection timed out": SyncErrorCategory.NETWORK,
    "no route to host": SyncErrorCategory.NETWORK,
    "temporary failure in name resolution": SyncErrorCategory.NETWORK,
    "timeout": SyncErrorCategory.NETWORK,

    # Authentication errors
    "authentication failed": SyncErrorCategory.AUTHENTICATION,
    "terminal prompts disabled": SyncErrorCategory.AUTHENTICATION,
    "could not read username": SyncErrorCategory.AUTHENTICATION,
    "invalid credentials": SyncErrorCategory.AUTHENTICATION,
    "permission denied": SyncErrorCategory.AUTHENTICATION,
    "forbidden": SyncErrorCategory.AUTHENTICATION,
    "returned error: 401": SyncErrorCategory.AUTHENTICATION,
    "returned error: 403": SyncErrorCategory.AUTHENTICATION,

    # Repository access errors
    "repository not found": SyncErrorCategory.REPOSITORY_ACCESS,
    "does not appear to be a git repository": SyncErrorCategory.REPOSITORY_ACCESS,
    "could not read from remote repository": SyncErrorCategory.REPOSITORY_ACCESS,

    # Local state
    "already exists and is not an empty directory": SyncErrorCategory.LOCAL_STATE,
    "would be overwritten": SyncErrorCategory.LOCAL_STATE,
    "not a git repository": SyncErrorCategory.REPOSITORY_CORRUPTION,

    # Branch errors
    "remote branch": SyncErrorCategory.BRANCH,
    "couldn't find remote ref": SyncErrorCategory.BRANCH,
    "unknown revision": SyncErrorCategory.BRANCH,
    "ambiguous argument": SyncErrorCategory.BRANCH,

    # Merge conflicts
    "automatic merge failed": SyncErrorCategory.MERGE_CONFLICT,
    "divergent branches": SyncErrorCategory.MERGE_CONFLICT,
    "unmerged paths": SyncErrorCategory.MERGE_CONFLICT,
    "conflict": SyncErrorCategory.MERGE_CONFLICT,

    # Repository corruption
    "corrupt": SyncErrorCategory.REPOSITORY_CORRUPTION,
    "invalid object": SyncErrorCategory.REPOSITORY_CORRUPTION,
    "loose object": SyncErrorCategory.REPOSITORY_CORRUPTION,
}


RESOLUTION_HINTS: Dict[SyncErrorCategory, str] = {
    SyncErrorCategory.NETWORK: "Check that the host is reachable and try again later",
    SyncErrorCategory.AUTHENTICATION: "Verify the configured username and token have read access",
    SyncErrorCategory.REPOSITORY_ACCESS: "Verify the host, organization and repository name",
    SyncErrorCategory.BRANCH: "Verify the configured branch exists on the remote",
    SyncErrorCategory.MERGE_CONFLICT: "Local history diverged; run a forced sync to reset the mirror",
    SyncErrorCategory.REPOSITORY_CORRUPTION: "The local mirror is damaged; remove it so it can be cloned again",
    SyncErrorCategory.LOCAL_STATE: "The mirror directory holds files that block the operation; clean it up",
    SyncErrorCategory.UNKNOWN: "Inspect the error details",
}


def categorize_git_error(message: Optional[str]) -> SyncErrorCategory:
    """Map a git error message to a SyncErrorCategory."""
    if not message:
        return SyncErrorCategory.UNKNOWN

    error_lower = message.lower()
    for pattern, category in ERROR_PATTERNS.items():
        if pattern in error_lower:
            return category
    return SyncErrorCategory.UNKNOWN
