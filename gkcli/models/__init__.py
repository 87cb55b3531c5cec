"""Data models for the unified provider view and auth state (Pydantic)."""

from gkcli.models.auth_token import AuthToken
from gkcli.models.credentials import BasicCredential, ProviderCredential, TokenCredential
from gkcli.models.issue import Issue
from gkcli.models.provider import ProviderName
from gkcli.models.pull_request import PullRequest
from gkcli.models.repo_locator import RepoLocator

__all__ = [
    "AuthToken",
    "BasicCredential",
    "Issue",
    "ProviderCredential",
    "ProviderName",
    "PullRequest",
    "RepoLocator",
    "TokenCredential",
]
