"""Provider REST clients and the shared HTTP request core."""

from gkcli.api.bitbucket import BitbucketClient
from gkcli.api.github import GitHubClient
from gkcli.api.gitlab import GitLabClient
from gkcli.api.http import BearerAuth, HTTPClient, TokenAuth

__all__ = [
    "BearerAuth",
    "BitbucketClient",
    "GitHubClient",
    "GitLabClient",
    "HTTPClient",
    "TokenAuth",
]
