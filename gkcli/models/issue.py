"""Unified issue model."""

from typing import List, Literal

from pydantic import BaseModel, Field

from gkcli.models.provider import ProviderName

IssueState = Literal["open", "closed"]


class Issue(BaseModel):
    """Issue normalized across providers (never a pull request)."""

    provider: ProviderName
    id: str
    number: int
    title: str
    body: str = ""
    state: IssueState
    url: str = ""
    author: str = ""
    labels: List[str] = Field(default_factory=list)
    created_at: str
    updated_at: str
