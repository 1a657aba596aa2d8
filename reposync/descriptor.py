"""Repository descriptors and their validation."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from .errors import (
    ConfigurationError, DuplicateRepository, MissingHost,
    MissingOrganization, MissingRepository
)


DEFAULT_BRANCH = "main"
DEFAULT_PROTOCOL = "https"


@dataclass(frozen=True)
class RepositoryAuth:
    """Credentials embedded in the fetch URL of a private repository."""
    username: str
    token: str = field(repr=False)


@dataclass(frozen=True)
class RepositoryDescriptor:
    """
    Configuration identifying one remote repository and how to reach it.

    ``name`` is the hosting provider key used to pick a URL builder
    (``github``, ``gitlab``, ``bitbucket``, ``generic``).
    """
    name: str
    host: str
    organization: str
    repository: str
    branch: str = DEFAULT_BRANCH
    protocol: str = DEFAULT_PROTOCOL
    auth: Optional[RepositoryAuth] = None

    @property
    def identity(self) -> tuple:
        """Case-insensitive (host, organization, repository) identity."""
        return (
            (self.host or "").lower(),
            (self.organization or "").lower(),
            (self.repository or "").lower(),
        )

    @property
    def display_name(self) -> str:
        """Human-readable name for this repository."""
        if self.organization and self.repository:
            return f"{self.organization}/{self.repository}"
        return self.repository or self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepositoryDescriptor":
        """Build a descriptor from a configuration entry."""
        if not isinstance(data, dict):
            raise ConfigurationError(f"Repository entry must be an object, got {type(data).__name__}")

        auth_data = data.get("auth")
        auth = None
        if auth_data:
            if not isinstance(auth_data, dict):
                raise ConfigurationError("Repository 'auth' must be an object with username and token")
            auth = RepositoryAuth(
                username=str(auth_data.get("username") or ""),
                token=str(auth_data.get("token") or ""),
            )

        return cls(
            name=str(data.get("name") or "").strip().lower(),
            host=str(data.get("host") or "").strip(),
            organization=str(data.get("organization") or "").strip(),
            repository=str(data.get("repository") or "").strip(),
            branch=str(data.get("branch") or DEFAULT_BRANCH).strip(),
            protocol=str(data.get("protocol") or DEFAULT_PROTOCOL).strip().lower(),
            auth=auth,
        )


def validate_repository(descriptor: RepositoryDescriptor) -> None:
    """
    Reject an incomplete descriptor before any URL, filesystem or network work.

    The repository name is checked first, then the organization, then the host.
    """
    if not (descriptor.repository or "").strip():
        raise MissingRepository()
    if not (descriptor.organization or "").strip():
        raise MissingOrganization()
    if not (descriptor.host or "").strip():
        raise MissingHost()


def validate_unique_repositories(descriptors: Iterable[RepositoryDescriptor]) -> None:
    """
    Reject a repository set in which two entries would share a local mirror.

    Mirrors are laid out by repository name, so two descriptors with the same
    name collide even when they live on different hosts.
    """
    seen_identities = {}
    seen_directories = {}

    for descriptor in descriptors:
        # Incomplete descriptors are rejected individually by validate_repository
        if not (descriptor.repository or "").strip():
            continue
        if descriptor.identity in seen_identities:
            raise DuplicateRepository(
                f"Repository {descriptor.display_name} on {descriptor.host} is configured more than once"
            )
        directory = descriptor.repository.lower()
        if directory in seen_directories:
            other = seen_directories[directory]
            raise DuplicateRepository(
                f"Repositories {other.display_name} and {descriptor.display_name} "
                f"would share the local directory '{descriptor.repository}'"
            )
        seen_identities[descriptor.identity] = descriptor
        seen_directories[directory] = descriptor
