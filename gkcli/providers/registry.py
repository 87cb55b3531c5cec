"""Provider registry: credentials in, lazily built adapters out."""

import logging
import threading
from typing import Dict, List

from gkcli.api.bitbucket import BITBUCKET_API_URL
from gkcli.api.github import GITHUB_API_URL
from gkcli.api.gitlab import GITLAB_API_URL
from gkcli.errors import ConfigurationError
from gkcli.models import BasicCredential, ProviderCredential, ProviderName, TokenCredential
from gkcli.providers.base import Provider
from gkcli.providers.bitbucket import BitbucketProvider
from gkcli.providers.github import GitHubProvider
from gkcli.providers.gitlab import GitLabProvider

LOG = logging.getLogger("gkcli.providers.registry")

DEFAULT_API_URLS: Dict[ProviderName, str] = {
    ProviderName.GITHUB: GITHUB_API_URL,
    ProviderName.GITLAB: GITLAB_API_URL,
    ProviderName.BITBUCKET: BITBUCKET_API_URL,
}

_MISSING_CREDENTIAL = {
    ProviderName.GITHUB: "GitHub token not configured (set github.token or GITHUB_TOKEN)",
    ProviderName.GITLAB: "GitLab token not configured (set gitlab.token or GITLAB_TOKEN)",
    ProviderName.BITBUCKET: (
        "Bitbucket credentials not configured (set bitbucket.username and bitbucket.app_password, "
        "or BITBUCKET_USERNAME and BITBUCKET_APP_PASSWORD)"
    ),
}


class ProviderRegistry:
    """Holds per-provider credentials for one invocation and hands out adapters.

    Setting a credential is free; the client is only built inside
    get_provider, and then cached per provider.
    """

    def __init__(self, api_urls: Dict[ProviderName, str] | None = None) -> None:
        self._api_urls = dict(DEFAULT_API_URLS)
        if api_urls:
            self._api_urls.update(api_urls)
        self._credentials: Dict[ProviderName, ProviderCredential] = {}
        self._providers: Dict[ProviderName, Provider] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config) -> "ProviderRegistry":
        """Build a registry from AppConfig (tokens resolved from env or secret files)."""
        registry = cls(
            api_urls={
                ProviderName.GITHUB: config.github.api_url,
                ProviderName.GITLAB: config.gitlab.api_url,
                ProviderName.BITBUCKET: config.bitbucket.api_url,
            }
        )
        if config.github_token_resolved:
            registry.set_github_token(config.github_token_resolved)
        if config.gitlab_token_resolved:
            registry.set_gitlab_token(config.gitlab_token_resolved)
        username = config.bitbucket.username
        secret = config.bitbucket_app_password_resolved
        if username and secret:
            registry.set_bitbucket_credentials(username, secret)
        return registry

    def _set(self, name: ProviderName, credential: ProviderCredential | None) -> None:
        with self._lock:
            if credential is None:
                self._credentials.pop(name, None)
            else:
                self._credentials[name] = credential
            stale = self._providers.pop(name, None)
        if stale is not None:
            stale.close()

    def set_github_token(self, token: str) -> None:
        self._set(ProviderName.GITHUB, TokenCredential(token=token) if token else None)

    def set_gitlab_token(self, token: str) -> None:
        self._set(ProviderName.GITLAB, TokenCredential(token=token) if token else None)

    def set_bitbucket_credentials(self, username: str, secret: str) -> None:
        credential = BasicCredential(username=username, secret=secret) if username and secret else None
        self._set(ProviderName.BITBUCKET, credential)

    def configured_providers(self) -> List[ProviderName]:
        return [name for name in ProviderName if name in self._credentials]

    def credential(self, name: str | ProviderName) -> ProviderCredential | None:
        return self._credentials.get(self._parse_name(name))

    @staticmethod
    def _parse_name(name: str | ProviderName) -> ProviderName:
        try:
            return ProviderName(name)
        except ValueError:
            raise ConfigurationError(f"unknown provider: {name}") from None

    def get_provider(self, name: str | ProviderName) -> Provider:
        """Return the adapter for name (case-insensitive).

        Raises ConfigurationError when the provider is unknown or its
        credential was never set.
        """
        provider_name = self._parse_name(name)
        with self._lock:
            cached = self._providers.get(provider_name)
            if cached is not None:
                return cached
            credential = self._credentials.get(provider_name)
            if credential is None:
                raise ConfigurationError(_MISSING_CREDENTIAL[provider_name])
            provider = self._build(provider_name, credential)
            self._providers[provider_name] = provider
        LOG.debug("Created %s provider", provider_name.value)
        return provider

    def _build(self, name: ProviderName, credential: ProviderCredential) -> Provider:
        api_url = self._api_urls[name]
        if name is ProviderName.BITBUCKET and isinstance(credential, BasicCredential):
            return BitbucketProvider.from_credentials(credential.username, credential.secret, api_url=api_url)
        if name is ProviderName.GITHUB and isinstance(credential, TokenCredential):
            return GitHubProvider.from_token(credential.token, api_url=api_url)
        if name is ProviderName.GITLAB and isinstance(credential, TokenCredential):
            return GitLabProvider.from_token(credential.token, api_url=api_url)
        raise ConfigurationError(f"{type(credential).__name__} is not a valid credential for {name.value}")

    def close(self) -> None:
        with self._lock:
            providers = list(self._providers.values())
            self._providers.clear()
        for provider in providers:
            provider.close()
