"""Hosting provider URL conventions."""

from .base import RepositoryUrlBuilder


class GenericUrlBuilder(RepositoryUrlBuilder):
    """Plain ``host/org/repo`` URLs, as served by self-hosted git servers."""

    provider = "generic"

    def _path(self) -> str:
        return f"{self.organization}/{self.repository}"


class GitHubUrlBuilder(RepositoryUrlBuilder):
    provider = "github"

    def _path(self) -> str:
        return f"{self.organization}/{self._repository_with_suffix()}"


class GitLabUrlBuilder(RepositoryUrlBuilder):
    """GitLab accepts nested groups, so the organization may contain slashes."""

    provider = "gitlab"

    def _path(self) -> str:
        return f"{self.organization}/{self._repository_with_suffix()}"


class BitbucketUrlBuilder(RepositoryUrlBuilder):
    provider = "bitbucket"

    def _path(self) -> str:
        return f"{self.organization}/{self._repository_with_suffix()}"
