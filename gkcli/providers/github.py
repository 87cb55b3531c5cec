"""GitHub adapter: native GitHub records to the unified model."""

from typing import List

from gkcli.api.github import GITHUB_API_URL, GitHubClient, GitHubIssue, GitHubPullRequest
from gkcli.models import Issue, ProviderName, PullRequest
from gkcli.providers.base import Provider, check_state_filter, normalize_issue_state, normalize_pr_state
from gkcli.utils import canonical_timestamp


def _pr_from_native(pr: GitHubPullRequest) -> PullRequest:
    return PullRequest(
        provider=ProviderName.GITHUB,
        id=str(pr.id),
        number=pr.number,
        title=pr.title,
        body=pr.body or "",
        state=normalize_pr_state(pr.state),
        url=pr.html_url,
        author=pr.user.login if pr.user else "",
        source_branch=pr.head.ref,
        target_branch=pr.base.ref,
        created_at=canonical_timestamp(pr.created_at),
        updated_at=canonical_timestamp(pr.updated_at),
    )


def _issue_from_native(issue: GitHubIssue) -> Issue:
    return Issue(
        provider=ProviderName.GITHUB,
        id=str(issue.id),
        number=issue.number,
        title=issue.title,
        body=issue.body or "",
        state=normalize_issue_state(issue.state),
        url=issue.html_url,
        author=issue.user.login if issue.user else "",
        labels=[label.name for label in issue.labels],
        created_at=canonical_timestamp(issue.created_at),
        updated_at=canonical_timestamp(issue.updated_at),
    )


class GitHubProvider(Provider):
    """GitHub implementation of the provider capability set."""

    name = ProviderName.GITHUB

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    @classmethod
    def from_token(cls, token: str, api_url: str = GITHUB_API_URL) -> "GitHubProvider":
        return cls(GitHubClient(token, api_url=api_url))

    def list_pull_requests(self, owner: str, repo: str, state: str = "open") -> List[PullRequest]:
        state = check_state_filter(state)
        # GitHub has no "merged" filter: merged PRs are closed ones with merged_at set.
        native_state = "closed" if state == "merged" else state
        prs = self._client.list_pull_requests(owner, repo, native_state)
        if state == "merged":
            prs = [pr for pr in prs if pr.merged_at is not None]
        return [_pr_from_native(pr) for pr in prs]

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        return _pr_from_native(self._client.get_pull_request(owner, repo, number))

    def list_issues(self, owner: str, repo: str, state: str = "open") -> List[Issue]:
        state = check_state_filter(state)
        native_state = "closed" if state == "merged" else state
        issues = self._client.list_issues(owner, repo, native_state)
        return [_issue_from_native(issue) for issue in issues if not issue.is_pull_request]

    def close(self) -> None:
        self._client.close()
