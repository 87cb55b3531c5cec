"""Bitbucket Cloud REST 2.0 client returning native records.

Terminology: "owner" is the Bitbucket workspace, "repo" the repo slug.
Listings come wrapped in a paginated envelope; only ``values`` of the first
page is read.
"""

from datetime import datetime
from typing import Any, List, Sequence

from pydantic import AliasPath, BaseModel, ConfigDict, Field
from requests.auth import HTTPBasicAuth

from gkcli.api.http import HTTPClient, parse_record, parse_records
from gkcli.errors import ProviderError

BITBUCKET_API_URL = "https://api.bitbucket.org/2.0"
DEFAULT_STATE = "OPEN"
DEFAULT_ISSUE_STATE = "open"


class BitbucketAccount(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str = ""
    nickname: str = ""
    display_name: str = ""

    @property
    def handle(self) -> str:
        return self.username or self.nickname or self.display_name


class BitbucketPullRequest(BaseModel):
    """Pull request. Bitbucket has a single ``id`` and no separate number."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str = ""
    description: str | None = None
    state: str
    url: str = Field(default="", validation_alias=AliasPath("links", "html", "href"))
    author: BitbucketAccount | None = None
    source_branch: str = Field(default="", validation_alias=AliasPath("source", "branch", "name"))
    destination_branch: str = Field(default="", validation_alias=AliasPath("destination", "branch", "name"))
    created_on: datetime
    updated_on: datetime


class BitbucketIssue(BaseModel):
    """Issue. There is no web URL in the payload and no label set, only ``kind``."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str = ""
    content: str | None = Field(default=None, validation_alias=AliasPath("content", "raw"))
    state: str
    kind: str = ""
    reporter: BitbucketAccount | None = None
    created_on: datetime
    updated_on: datetime


def _values(data: Any) -> Any:
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ProviderError(f"Expected a paginated Bitbucket response, got {type(data).__name__}")
    return data.get("values") or []


class BitbucketClient:
    """Bitbucket API client (HTTP Basic over username and app password)."""

    def __init__(self, username: str, secret: str, api_url: str = BITBUCKET_API_URL) -> None:
        self._http = HTTPClient(api_url, HTTPBasicAuth(username, secret))

    def list_pull_requests(
        self,
        workspace: str,
        repo: str,
        state: str | Sequence[str] = "",
    ) -> List[BitbucketPullRequest]:
        """List pull requests. A sequence of states is sent as a repeated ``state`` parameter."""
        if isinstance(state, str):
            state = state or DEFAULT_STATE
        else:
            state = list(state) or [DEFAULT_STATE]
        data = self._http.get(f"/repositories/{workspace}/{repo}/pullrequests", params={"state": state})
        return parse_records(BitbucketPullRequest, _values(data))

    def get_pull_request(self, workspace: str, repo: str, pr_id: int) -> BitbucketPullRequest:
        data = self._http.get(f"/repositories/{workspace}/{repo}/pullrequests/{pr_id}")
        return parse_record(BitbucketPullRequest, data)

    def list_issues(self, workspace: str, repo: str, state: str | None = "") -> List[BitbucketIssue]:
        """List issues. An empty state means open issues; None omits the filter."""
        params = None if state is None else {"state": state or DEFAULT_ISSUE_STATE}
        data = self._http.get(f"/repositories/{workspace}/{repo}/issues", params=params)
        return parse_records(BitbucketIssue, _values(data))

    def close(self) -> None:
        self._http.close()
