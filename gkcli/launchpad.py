"""Cross-repository aggregation of pull requests and issues.

Each repository is resolved to its provider and fetched independently on a
bounded thread pool. A failing repository is logged, recorded in the
result's ``failures`` and skipped; the others still come back.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Generic, Iterable, List, Literal, Tuple, TypeVar

from pydantic import BaseModel, Field

from gkcli.errors import ConfigurationError, ProviderError, ResolutionError
from gkcli.models import Issue, ProviderName, PullRequest, RepoLocator
from gkcli.providers.base import Provider, check_state_filter
from gkcli.providers.registry import ProviderRegistry
from gkcli.providers.resolver import resolve_remote

LOG = logging.getLogger("gkcli.launchpad")

DEFAULT_MAX_WORKERS = 8

# Failures confined to one repository; anything else propagates.
ISOLATED_ERRORS = (ResolutionError, ConfigurationError, ProviderError)

T = TypeVar("T")
R = TypeVar("R")


class Repository(BaseModel):
    """A repository to aggregate over: display name and git remote URL."""

    name: str = ""
    remote: str = ""

    @property
    def label(self) -> str:
        return self.name or self.remote


class RepositoryFailure(BaseModel):
    """One repository that could not be fetched, with the reason."""

    repository: Repository
    error: str
    error_type: str = ""


class AggregateResult(BaseModel, Generic[T]):
    """Items from every repository that succeeded, plus the ones that did not."""

    items: List[T] = Field(default_factory=list)
    failures: List[RepositoryFailure] = Field(default_factory=list)

    @property
    def incomplete(self) -> bool:
        return bool(self.failures)


class RepositoryPullRequests(BaseModel):
    repository: Repository
    locator: RepoLocator
    pull_requests: List[PullRequest] = Field(default_factory=list)


class LaunchpadItem(BaseModel):
    """A pull request or issue from any repository, in one flat list."""

    kind: Literal["pr", "issue"]
    provider: ProviderName
    repository: str
    number: int
    title: str
    state: str
    author: str = ""
    url: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_pull_request(cls, repository: str, pr: PullRequest) -> "LaunchpadItem":
        return cls(
            kind="pr",
            provider=pr.provider,
            repository=repository,
            number=pr.number,
            title=pr.title,
            state=pr.state,
            author=pr.author,
            url=pr.url,
            created_at=pr.created_at,
            updated_at=pr.updated_at,
        )

    @classmethod
    def from_issue(cls, repository: str, issue: Issue) -> "LaunchpadItem":
        return cls(
            kind="issue",
            provider=issue.provider,
            repository=repository,
            number=issue.number,
            title=issue.title,
            state=issue.state,
            author=issue.author,
            url=issue.url,
            created_at=issue.created_at,
            updated_at=issue.updated_at,
        )


def resolve_repository(repo: Repository, registry: ProviderRegistry) -> Tuple[Provider, RepoLocator]:
    """Resolve repo.remote and return the matching adapter with its locator."""
    locator = resolve_remote(repo.remote)
    return registry.get_provider(locator.provider), locator


def _fan_out(
    repos: Iterable[Repository],
    fetch: Callable[[Repository], R],
    max_workers: int,
) -> Tuple[List[R], List[RepositoryFailure]]:
    """Run fetch for every repository with a remote; results keep input order."""
    targets = []
    for repo in repos:
        if not repo.remote:
            LOG.debug("Skipping %s: no remote", repo.label or "unnamed repository")
            continue
        targets.append(repo)
    if not targets:
        return [], []

    results: Dict[int, R] = {}
    failures: Dict[int, RepositoryFailure] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(targets)))) as executor:
        future_to_idx = {executor.submit(fetch, repo): i for i, repo in enumerate(targets)}
        for future in as_completed(future_to_idx):
            i = future_to_idx[future]
            repo = targets[i]
            try:
                results[i] = future.result()
            except ISOLATED_ERRORS as e:
                LOG.warning("Skipping %s: %s", repo.label, e)
                failures[i] = RepositoryFailure(repository=repo, error=str(e), error_type=type(e).__name__)

    return [results[i] for i in sorted(results)], [failures[i] for i in sorted(failures)]


def collect_pull_requests(
    repos: Iterable[Repository],
    registry: ProviderRegistry,
    state: str = "open",
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> AggregateResult[RepositoryPullRequests]:
    """Pull requests for every repository, grouped per repository."""
    state = check_state_filter(state)

    def fetch(repo: Repository) -> RepositoryPullRequests:
        provider, locator = resolve_repository(repo, registry)
        prs = provider.list_pull_requests(locator.owner, locator.repo, state)
        LOG.debug("%s: %d pull request(s)", repo.label, len(prs))
        return RepositoryPullRequests(repository=repo, locator=locator, pull_requests=prs)

    items, failures = _fan_out(repos, fetch, max_workers)
    return AggregateResult[RepositoryPullRequests](items=items, failures=failures)


def load_launchpad(
    repos: Iterable[Repository],
    registry: ProviderRegistry,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> AggregateResult[LaunchpadItem]:
    """Open pull requests and issues across repositories, most recently updated first."""

    def fetch(repo: Repository) -> List[LaunchpadItem]:
        provider, locator = resolve_repository(repo, registry)
        label = repo.name or locator.full_name
        prs = provider.list_pull_requests(locator.owner, locator.repo, "open")
        issues = provider.list_issues(locator.owner, locator.repo, "open")
        items = [LaunchpadItem.from_pull_request(label, pr) for pr in prs]
        items.extend(LaunchpadItem.from_issue(label, issue) for issue in issues)
        return items

    per_repo, failures = _fan_out(repos, fetch, max_workers)
    items = [item for batch in per_repo for item in batch]
    # Canonical UTC timestamps sort correctly as strings.
    items.sort(key=lambda item: item.updated_at, reverse=True)
    return AggregateResult[LaunchpadItem](items=items, failures=failures)
