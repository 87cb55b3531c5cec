"""Map a git remote URL to (provider, owner, repo). Pure, no network access."""

from typing import List, Tuple

from gkcli.errors import ResolutionError
from gkcli.models import ProviderName, RepoLocator

# Checked in this order; the first marker found in the URL wins.
HOST_MARKERS: Tuple[Tuple[str, ProviderName], ...] = (
    ("github.com", ProviderName.GITHUB),
    ("gitlab.com", ProviderName.GITLAB),
    ("bitbucket.org", ProviderName.BITBUCKET),
)


def _path_segments(rest: str, port_allowed: bool) -> List[str]:
    # After the host comes "/owner/repo" (https, ssh://) or ":owner/repo" (scp-like ssh).
    rest = rest.split("?", 1)[0].split("#", 1)[0]
    segments = [s for s in rest.lstrip(":").split("/") if s]
    # ssh://git@host:22/owner/repo; scp-like remotes never carry a port.
    if port_allowed and rest.startswith(":") and len(segments) > 2 and segments[0].isdigit():
        segments = segments[1:]
    return segments


def resolve_remote(url: str) -> RepoLocator:
    """Resolve a remote URL (https or SSH, with or without .git).

    GitHub and Bitbucket use the first two path segments as owner and repo.
    GitLab projects may be nested: owner is every segment but the last.
    """
    cleaned = (url or "").strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]
    port_allowed = cleaned.lower().startswith("ssh://")

    for marker, provider in HOST_MARKERS:
        idx = cleaned.find(marker)
        if idx == -1:
            continue
        segments = _path_segments(cleaned[idx + len(marker) :], port_allowed)
        if len(segments) < 2:
            raise ResolutionError(f"Invalid {provider.value} repository URL: {url}")
        if provider is ProviderName.GITLAB:
            return RepoLocator(provider=provider, owner="/".join(segments[:-1]), repo=segments[-1])
        return RepoLocator(provider=provider, owner=segments[0], repo=segments[1])

    raise ResolutionError(f"Unsupported provider URL: {url}")
