"""Repository URL builders keyed by hosting provider."""

from typing import Dict, Type

from ..descriptor import RepositoryDescriptor
from ..errors import ConfigurationError
from .base import RepositoryUrlBuilder, SUPPORTED_PROTOCOLS
from .providers import (
    BitbucketUrlBuilder, GenericUrlBuilder, GitHubUrlBuilder, GitLabUrlBuilder
)

URL_BUILDERS: Dict[str, Type[RepositoryUrlBuilder]] = {
    builder.provider: builder
    for builder in (GenericUrlBuilder, GitHubUrlBuilder, GitLabUrlBuilder, BitbucketUrlBuilder)
}


def get_builder(provider: str) -> RepositoryUrlBuilder:
    """Return a fresh URL builder for ``provider``."""
    builder_class = URL_BUILDERS.get((provider or "").strip().lower())
    if builder_class is None:
        raise ConfigurationError(
            f"Unknown repository provider '{provider}'; "
            f"expected one of {', '.join(sorted(URL_BUILDERS))}"
        )
    return builder_class()


def build_repository_url(descriptor: RepositoryDescriptor, builder: RepositoryUrlBuilder) -> str:
    """
    Configure ``builder`` from ``descriptor`` and build the fetch URL.

    With auth the URL is private and carries the credentials, without auth
    it is public.
    """
    builder = (builder
               .set_host(descriptor.host)
               .set_protocol(descriptor.protocol)
               .set_organization(descriptor.organization)
               .set_repository(descriptor.repository))

    if descriptor.auth:
        builder.set_as_public(False)
        builder.set_credentials(descriptor.auth.username, descriptor.auth.token)
    else:
        builder.set_as_public(True)

    return builder.build()


__all__ = [
    'RepositoryUrlBuilder',
    'GenericUrlBuilder',
    'GitHubUrlBuilder',
    'GitLabUrlBuilder',
    'BitbucketUrlBuilder',
    'SUPPORTED_PROTOCOLS',
    'URL_BUILDERS',
    'get_builder',
    'build_repository_url',
]
