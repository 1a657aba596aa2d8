"""Fluent repository URL builder shared by all hosting providers."""

from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

from ..errors import ConfigurationError


SUPPORTED_PROTOCOLS = ("https", "http", "ssh")


class RepositoryUrlBuilder(ABC):
    """
    Build the fetch URL of one repository.

    Setters return the builder so calls can be chained::

        url = (GitHubUrlBuilder()
               .set_host("github.com")
               .set_organization("acme")
               .set_repository("svc-a")
               .set_credentials("ci", "token")
               .build())
    """

    provider: str = ""

    def __init__(self):
        self.host: Optional[str] = None
        self.protocol: str = "https"
        self.organization: Optional[str] = None
        self.repository: Optional[str] = None
        self.is_public: bool = True
        self.username: Optional[str] = None
        self.token: Optional[str] = None

    def set_host(self, host: str) -> "RepositoryUrlBuilder":
        self.host = host.strip().rstrip("/") if host else host
        return self

    def set_protocol(self, protocol: str) -> "RepositoryUrlBuilder":
        self.protocol = (protocol or "https").strip().lower()
        return self

    def set_organization(self, organization: str) -> "RepositoryUrlBuilder":
        self.organization = organization.strip().strip("/") if organization else organization
        return self

    def set_repository(self, repository: str) -> "RepositoryUrlBuilder":
        self.repository = repository.strip().strip("/") if repository else repository
        return self

    def set_as_public(self, is_public: bool) -> "RepositoryUrlBuilder":
        self.is_public = is_public
        return self

    def set_credentials(self, username: str, token: str) -> "RepositoryUrlBuilder":
        self.username = username
        self.token = token
        return self

    def build(self) -> str:
        """Return the fetch URL, failing before any string is produced if fields are missing."""
        missing = [
            name for name, value in (
                ("host", self.host),
                ("organization", self.organization),
                ("repository", self.repository),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Cannot build {self.provider or 'repository'} URL: missing {', '.join(missing)}"
            )

        if self.protocol not in SUPPORTED_PROTOCOLS:
            raise ConfigurationError(
                f"Unsupported protocol '{self.protocol}' for {self.provider} repository; "
                f"expected one of {', '.join(SUPPORTED_PROTOCOLS)}"
            )

        if self.protocol == "ssh":
            if not self.is_public:
                raise ConfigurationError(
                    "Credentials cannot be embedded in an ssh URL; use https or drop the auth block"
                )
            return self._build_ssh()

        return f"{self.protocol}://{self._userinfo()}{self.host}/{self._path()}"

    def _userinfo(self) -> str:
        if self.is_public or not (self.username or self.token):
            return ""
        username = quote(self.username or "", safe="")
        token = quote(self.token or "", safe="")
        return f"{username}:{token}@"

    def _build_ssh(self) -> str:
        return f"git@{self.host}:{self.organization}/{self._repository_with_suffix()}"

    def _repository_with_suffix(self) -> str:
        if self.repository.endswith(".git"):
            return self.repository
        return f"{self.repository}.git"

    @abstractmethod
    def _path(self) -> str:
        """Path component after the host, per provider convention."""
