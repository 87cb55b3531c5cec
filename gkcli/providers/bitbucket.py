"""Bitbucket adapter: native Bitbucket Cloud records to the unified model.

Bitbucket terminology mapping:
  - "owner" is the Bitbucket workspace, "repo" the repo slug
  - PR and issue ``number`` is the Bitbucket ``id``
  - states are upper/mixed case and lower-cased here
  - issues carry no web URL (synthesized) and no labels (``kind`` instead)
"""

from typing import Dict, List, Sequence

from gkcli.api.bitbucket import BITBUCKET_API_URL, BitbucketClient, BitbucketIssue, BitbucketPullRequest
from gkcli.models import Issue, ProviderName, PullRequest
from gkcli.providers.base import Provider, check_state_filter, normalize_issue_state, normalize_pr_state
from gkcli.utils import canonical_timestamp

BITBUCKET_WEB_URL = "https://bitbucket.org"

_PR_FILTERS: Dict[str, Sequence[str]] = {
    "open": ["OPEN"],
    "merged": ["MERGED"],
    "closed": ["DECLINED", "SUPERSEDED"],
    "all": ["OPEN", "MERGED", "DECLINED", "SUPERSEDED"],
}

_ISSUE_FILTERS: Dict[str, str | None] = {
    "open": "open",
    "closed": "closed",
    "merged": "closed",
    "all": None,
}


def issue_web_url(workspace: str, repo: str, issue_id: int) -> str:
    return f"{BITBUCKET_WEB_URL}/{workspace}/{repo}/issues/{issue_id}"


def _pr_from_native(pr: BitbucketPullRequest) -> PullRequest:
    return PullRequest(
        provider=ProviderName.BITBUCKET,
        id=str(pr.id),
        number=pr.id,
        title=pr.title,
        body=pr.description or "",
        state=normalize_pr_state(pr.state),
        url=pr.url,
        author=pr.author.handle if pr.author else "",
        source_branch=pr.source_branch,
        target_branch=pr.destination_branch,
        created_at=canonical_timestamp(pr.created_on),
        updated_at=canonical_timestamp(pr.updated_on),
    )


def _issue_from_native(workspace: str, repo: str, issue: BitbucketIssue) -> Issue:
    return Issue(
        provider=ProviderName.BITBUCKET,
        id=str(issue.id),
        number=issue.id,
        title=issue.title,
        body=issue.content or "",
        state=normalize_issue_state(issue.state),
        url=issue_web_url(workspace, repo, issue.id),
        author=issue.reporter.handle if issue.reporter else "",
        labels=[issue.kind],
        created_at=canonical_timestamp(issue.created_on),
        updated_at=canonical_timestamp(issue.updated_on),
    )


class BitbucketProvider(Provider):
    """Bitbucket Cloud implementation of the provider capability set."""

    name = ProviderName.BITBUCKET

    def __init__(self, client: BitbucketClient) -> None:
        self._client = client

    @classmethod
    def from_credentials(
        cls,
        username: str,
        secret: str,
        api_url: str = BITBUCKET_API_URL,
    ) -> "BitbucketProvider":
        return cls(BitbucketClient(username, secret, api_url=api_url))

    def list_pull_requests(self, owner: str, repo: str, state: str = "open") -> List[PullRequest]:
        native_states = _PR_FILTERS[check_state_filter(state)]
        prs = self._client.list_pull_requests(owner, repo, native_states)
        return [_pr_from_native(pr) for pr in prs]

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        return _pr_from_native(self._client.get_pull_request(owner, repo, number))

    def list_issues(self, owner: str, repo: str, state: str = "open") -> List[Issue]:
        native_state = _ISSUE_FILTERS[check_state_filter(state)]
        issues = self._client.list_issues(owner, repo, native_state)
        return [_issue_from_native(owner, repo, issue) for issue in issues]

    def close(self) -> None:
        self._client.close()
