"""Provider adapters (base and implementations), registry and remote URL resolver."""

from gkcli.providers.base import Provider
from gkcli.providers.bitbucket import BitbucketProvider
from gkcli.providers.github import GitHubProvider
from gkcli.providers.gitlab import GitLabProvider
from gkcli.providers.registry import ProviderRegistry
from gkcli.providers.resolver import resolve_remote

__all__ = [
    "BitbucketProvider",
    "GitHubProvider",
    "GitLabProvider",
    "Provider",
    "ProviderRegistry",
    "resolve_remote",
]
