"""Abstract capability set shared by all provider adapters, plus state vocabulary.

Callers hold a Provider and never branch on which hosting service is behind
it: every adapter returns the unified PullRequest and Issue models.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from gkcli.errors import ProviderError
from gkcli.models import Issue, ProviderName, PullRequest

# Unified state filters accepted by list_pull_requests / list_issues.
STATE_FILTERS = ("open", "closed", "merged", "all")

_PR_STATES: Dict[str, str] = {
    "open": "open",
    "opened": "open",
    "new": "open",
    "on hold": "open",
    "merged": "merged",
    "closed": "closed",
    "declined": "closed",
    "superseded": "closed",
    "locked": "closed",
}

_ISSUE_STATES: Dict[str, str] = {
    "open": "open",
    "opened": "open",
    "new": "open",
    "on hold": "open",
    "closed": "closed",
    "resolved": "closed",
    "invalid": "closed",
    "duplicate": "closed",
    "wontfix": "closed",
    "locked": "closed",
}


def normalize_pr_state(native: str) -> str:
    """Lower-case a native PR state and map it onto open/closed/merged."""
    key = (native or "").strip().lower()
    try:
        return _PR_STATES[key]
    except KeyError:
        raise ProviderError(f"Unknown pull request state: {native!r}") from None


def normalize_issue_state(native: str) -> str:
    """Lower-case a native issue state and map it onto open/closed."""
    key = (native or "").strip().lower()
    try:
        return _ISSUE_STATES[key]
    except KeyError:
        raise ProviderError(f"Unknown issue state: {native!r}") from None


def check_state_filter(state: str) -> str:
    """Validate a unified state filter; empty means open."""
    state = (state or "open").strip().lower()
    if state not in STATE_FILTERS:
        raise ValueError(f"Invalid state filter {state!r}; expected one of {', '.join(STATE_FILTERS)}")
    return state


class Provider(ABC):
    """Unified read access to one hosting service."""

    name: ProviderName

    @abstractmethod
    def list_pull_requests(self, owner: str, repo: str, state: str = "open") -> List[PullRequest]:
        """List pull requests filtered by a unified state (open, closed, merged, all)."""
        ...

    @abstractmethod
    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        """Fetch one pull request by its human-visible number."""
        ...

    @abstractmethod
    def list_issues(self, owner: str, repo: str, state: str = "open") -> List[Issue]:
        """List issues (never pull requests) filtered by a unified state."""
        ...

    def close(self) -> None:
        """Release HTTP resources. Override if the adapter holds a client."""
