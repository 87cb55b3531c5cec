"""GitLab adapter: merge requests and issues to the unified model.

The unified ``number`` is the project-scoped ``iid``; ``id`` keeps the
global identifier.
"""

from typing import List

from gkcli.api.gitlab import GITLAB_API_URL, GitLabClient, GitLabIssue, GitLabMergeRequest
from gkcli.models import Issue, ProviderName, PullRequest
from gkcli.providers.base import Provider, check_state_filter, normalize_issue_state, normalize_pr_state
from gkcli.utils import canonical_timestamp

_PR_FILTERS = {"open": "opened", "closed": "closed", "merged": "merged", "all": "all"}
_ISSUE_FILTERS = {"open": "opened", "closed": "closed", "merged": "closed", "all": "all"}


def _project_id(owner: str, repo: str) -> str:
    return f"{owner}/{repo}"


def _pr_from_native(mr: GitLabMergeRequest) -> PullRequest:
    return PullRequest(
        provider=ProviderName.GITLAB,
        id=str(mr.id),
        number=mr.iid,
        title=mr.title,
        body=mr.description or "",
        state=normalize_pr_state(mr.state),
        url=mr.web_url,
        author=mr.author.username if mr.author else "",
        source_branch=mr.source_branch,
        target_branch=mr.target_branch,
        created_at=canonical_timestamp(mr.created_at),
        updated_at=canonical_timestamp(mr.updated_at),
    )


def _issue_from_native(issue: GitLabIssue) -> Issue:
    return Issue(
        provider=ProviderName.GITLAB,
        id=str(issue.id),
        number=issue.iid,
        title=issue.title,
        body=issue.description or "",
        state=normalize_issue_state(issue.state),
        url=issue.web_url,
        author=issue.author.username if issue.author else "",
        labels=list(issue.labels),
        created_at=canonical_timestamp(issue.created_at),
        updated_at=canonical_timestamp(issue.updated_at),
    )


class GitLabProvider(Provider):
    """GitLab implementation of the provider capability set."""

    name = ProviderName.GITLAB

    def __init__(self, client: GitLabClient) -> None:
        self._client = client

    @classmethod
    def from_token(cls, token: str, api_url: str = GITLAB_API_URL) -> "GitLabProvider":
        return cls(GitLabClient(token, api_url=api_url))

    def list_pull_requests(self, owner: str, repo: str, state: str = "open") -> List[PullRequest]:
        native_state = _PR_FILTERS[check_state_filter(state)]
        mrs = self._client.list_merge_requests(_project_id(owner, repo), native_state)
        return [_pr_from_native(mr) for mr in mrs]

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        return _pr_from_native(self._client.get_merge_request(_project_id(owner, repo), number))

    def list_issues(self, owner: str, repo: str, state: str = "open") -> List[Issue]:
        native_state = _ISSUE_FILTERS[check_state_filter(state)]
        issues = self._client.list_issues(_project_id(owner, repo), native_state)
        return [_issue_from_native(issue) for issue in issues]

    def close(self) -> None:
        self._client.close()
