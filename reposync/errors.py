"""Error taxonomy and MCP error responses for RepoSync."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional

from .logging_config import mask_credentials


class RepoSyncError(Exception):
    """Base class for every error raised by RepoSync."""


class ConfigurationError(RepoSyncError):
    """Unknown provider key, incomplete URL fields or malformed configuration."""


class ValidationError(RepoSyncError):
    """A repository descriptor failed validation before any I/O."""

    field: Optional[str] = None


class MissingRepository(ValidationError):
    field = "repository"

    def __init__(self, message: str = "Repository name is required"):
        super().__init__(message)


class MissingOrganization(ValidationError):
    field = "organization"

    def __init__(self, message: str = "Organization name is required"):
        super().__init__(message)


class MissingHost(ValidationError):
    field = "host"

    def __init__(self, message: str = "Host is required"):
        super().__init__(message)


class InvalidRepositoryPath(ValidationError):
    """Repository name would resolve outside of the base path."""

    field = "repository"


class DuplicateRepository(ValidationError):
    """Two descriptors resolve to the same repository identity or directory."""

    field = "repository"


class DirectoryError(RepoSyncError, OSError):
    """The local mirror directory could not be created."""

    def __init__(self, path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot create directory {path}: {cause}")


class SyncFailure(RepoSyncError):
    """A clone or pull failed against the git capability."""

    gateway = False

    def __init__(self, repository: str, operation: str, cause: Exception):
        self.repository = repository
        self.operation = operation
        self.cause = cause
        super().__init__(
            f"{operation} failed for repository {repository}: "
            f"{mask_credentials(describe_cause(cause))}"
        )


class ForceSyncFailure(SyncFailure):
    """
    Forced resynchronization failed.

    Classified as a gateway error: the fetch/reset/pull sequence may have
    partially executed, usually because the remote was unreachable.
    """

    gateway = True


class SyncAggregateError(RepoSyncError):
    """Raised by the coordinator after every repository task has settled."""

    def __init__(self, report):
        self.report = report
        failed = ", ".join(outcome.repository for outcome in report.failed)
        super().__init__(
            f"{len(report.failed)} of {len(report.outcomes)} repositories failed to sync: {failed}"
        )


_STDERR_PREFIX = "stderr: '"


def describe_cause(error: BaseException) -> str:
    """Best human readable text for an underlying error (GitPython keeps it in stderr)."""
    stderr = getattr(error, "stderr", None)
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    if stderr and stderr.strip():
        stderr = stderr.strip()
        # GitCommandError wraps the output as "stderr: '<text>'"
        if stderr.startswith(_STDERR_PREFIX) and stderr.endswith("'"):
            stderr = stderr[len(_STDERR_PREFIX):-1].strip()
        return stderr
    return str(error) or error.__class__.__name__


class ErrorCategory(Enum):
    """Categories of errors reported through the MCP surface."""
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    FILE_IO = "file_io"
    GIT_SYNC = "git_sync"
    GATEWAY = "gateway"
    SYSTEM = "system"


@dataclass
class ErrorResponse:
    """Standardized error response format for MCP tools."""
    error: str
    error_code: str
    message: str
    timestamp: str
    category: str
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert error response to dictionary format."""
        result = {
            "error": self.error,
            "error_code": self.error_code,
            "message": self.message,
            "timestamp": self.timestamp,
            "category": self.category
        }
        if self.context:
            result["context"] = self.context
        return result


class ErrorHandler:
    """Turns RepoSync exceptions into structured MCP error responses."""

    def __init__(self):
        self.logger = logging.getLogger('reposync.error_handler')

    def handle_sync_error(self, error: Exception, context: Dict[str, Any] = None) -> ErrorResponse:
        """Map an exception raised during a sync operation to an ErrorResponse."""
        context = context or {}
        message = mask_credentials(str(error))

        if isinstance(error, ForceSyncFailure):
            error_code = "FORCE_SYNC_FAILED"
            category = ErrorCategory.GATEWAY
            title = "Forced synchronization failed"
        elif isinstance(error, SyncFailure):
            error_code = f"{error.operation.upper()}_FAILED"
            category = ErrorCategory.GIT_SYNC
            title = "Repository synchronization failed"
        elif isinstance(error, SyncAggregateError):
            error_code = "SYNC_PARTIALLY_FAILED"
            category = ErrorCategory.GIT_SYNC
            title = "Repository synchronization failed"
        elif isinstance(error, ValidationError):
            error_code = f"VALIDATION_{type(error).__name__.upper()}"
            category = ErrorCategory.VALIDATION
            title = "Validation error"
        elif isinstance(error, ConfigurationError):
            error_code = "CONFIGURATION_ERROR"
            category = ErrorCategory.CONFIGURATION
            title = "Configuration error"
        elif isinstance(error, OSError):
            error_code = "FILE_IO_ERROR"
            category = ErrorCategory.FILE_IO
            title = "File operation failed"
        else:
            error_code = "SYSTEM_ERROR"
            category = ErrorCategory.SYSTEM
            title = "Unexpected error"

        error_response = ErrorResponse(
            error=title,
            error_code=error_code,
            message=message,
            timestamp=datetime.now().isoformat(),
            category=category.value,
            context=context
        )

        self.logger.warning(
            f"Sync error: {message}",
            extra={
                'operation': 'sync_error',
                'error_code': error_code,
                'repository': context.get('repository')
            }
        )

        return error_response


# Initialize global error handler
error_handler = ErrorHandler()
