"""GitLab REST v4 client returning native records."""

from datetime import datetime
from typing import List
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from gkcli.api.http import BearerAuth, HTTPClient, parse_record, parse_records

GITLAB_API_URL = "https://gitlab.com/api/v4"
DEFAULT_STATE = "opened"


class GitLabUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    username: str = ""
    name: str = ""


class GitLabMergeRequest(BaseModel):
    """Merge request. ``id`` is global, ``iid`` is scoped to the project."""

    model_config = ConfigDict(extra="ignore")

    id: int
    iid: int
    title: str = ""
    description: str | None = None
    state: str
    web_url: str = ""
    author: GitLabUser | None = None
    source_branch: str = ""
    target_branch: str = ""
    created_at: datetime
    updated_at: datetime


class GitLabIssue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    iid: int
    title: str = ""
    description: str | None = None
    state: str
    web_url: str = ""
    author: GitLabUser | None = None
    labels: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


def project_path(project_id: str) -> str:
    """Encode a namespaced project path as a single URL segment (a/b/c -> a%2Fb%2Fc)."""
    return quote(project_id, safe="")


class GitLabClient:
    """GitLab API client (``Authorization: Bearer ...``)."""

    def __init__(self, token: str, api_url: str = GITLAB_API_URL) -> None:
        self._http = HTTPClient(api_url, BearerAuth(token))

    def list_merge_requests(self, project_id: str, state: str = "") -> List[GitLabMergeRequest]:
        data = self._http.get(
            f"/projects/{project_path(project_id)}/merge_requests",
            params={"state": state or DEFAULT_STATE},
        )
        return parse_records(GitLabMergeRequest, data)

    def get_merge_request(self, project_id: str, iid: int) -> GitLabMergeRequest:
        data = self._http.get(f"/projects/{project_path(project_id)}/merge_requests/{iid}")
        return parse_record(GitLabMergeRequest, data)

    def list_issues(self, project_id: str, state: str = "") -> List[GitLabIssue]:
        data = self._http.get(
            f"/projects/{project_path(project_id)}/issues",
            params={"state": state or DEFAULT_STATE},
        )
        return parse_records(GitLabIssue, data)

    def close(self) -> None:
        self._http.close()
