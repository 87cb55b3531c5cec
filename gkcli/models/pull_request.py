"""Unified pull request (or merge request) model."""

from typing import Literal

from pydantic import BaseModel

from gkcli.models.provider import ProviderName

PullRequestState = Literal["open", "closed", "merged"]


class PullRequest(BaseModel):
    """Pull request normalized across providers."""

    provider: ProviderName
    id: str
    number: int
    title: str
    body: str = ""
    state: PullRequestState
    url: str = ""
    author: str = ""
    source_branch: str = ""
    target_branch: str = ""
    created_at: str
    updated_at: str
