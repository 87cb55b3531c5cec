"""GitHub REST v3 client returning native records."""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from gkcli.api.http import HTTPClient, TokenAuth, parse_record, parse_records

GITHUB_API_URL = "https://api.github.com"
DEFAULT_STATE = "open"


class GitHubUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str = ""


class GitHubBranch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ref: str = ""
    sha: str = ""


class GitHubLabel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    color: str = ""


class GitHubPullRequest(BaseModel):
    """Pull request as returned by /repos/{owner}/{repo}/pulls."""

    model_config = ConfigDict(extra="ignore")

    id: int
    number: int
    title: str = ""
    body: str | None = None
    state: str
    html_url: str = ""
    user: GitHubUser | None = None
    head: GitHubBranch = Field(default_factory=GitHubBranch)
    base: GitHubBranch = Field(default_factory=GitHubBranch)
    created_at: datetime
    updated_at: datetime
    merged_at: datetime | None = None


class GitHubIssue(BaseModel):
    """Issue as returned by /repos/{owner}/{repo}/issues.

    The listing also contains pull requests; those carry ``pull_request``.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    number: int
    title: str = ""
    body: str | None = None
    state: str
    html_url: str = ""
    user: GitHubUser | None = None
    labels: List[GitHubLabel] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    pull_request: Dict[str, Any] | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None


class GitHubClient:
    """GitHub API client (``Authorization: token ...``)."""

    def __init__(self, token: str, api_url: str = GITHUB_API_URL) -> None:
        self._http = HTTPClient(
            api_url,
            TokenAuth(token),
            headers={"Accept": "application/vnd.github.v3+json"},
        )

    def list_pull_requests(self, owner: str, repo: str, state: str = "") -> List[GitHubPullRequest]:
        data = self._http.get(f"/repos/{owner}/{repo}/pulls", params={"state": state or DEFAULT_STATE})
        return parse_records(GitHubPullRequest, data)

    def get_pull_request(self, owner: str, repo: str, number: int) -> GitHubPullRequest:
        data = self._http.get(f"/repos/{owner}/{repo}/pulls/{number}")
        return parse_record(GitHubPullRequest, data)

    def list_issues(self, owner: str, repo: str, state: str = "") -> List[GitHubIssue]:
        data = self._http.get(f"/repos/{owner}/{repo}/issues", params={"state": state or DEFAULT_STATE})
        return parse_records(GitHubIssue, data)

    def close(self) -> None:
        self._http.close()
