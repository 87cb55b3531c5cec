"""Shared helpers: canonical timestamps and token masking."""

from datetime import datetime, timezone

CANONICAL_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def canonical_timestamp(value: datetime | None) -> str:
    """Render a datetime as RFC 3339 UTC with second precision.

    Naive values are taken as UTC. None renders as an empty string.
    """
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(CANONICAL_FORMAT)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC 3339 string (trailing Z allowed). Returns None if invalid."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError, AttributeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def mask_secret(value: str, visible: int = 8) -> str:
    """Show only the first characters of a secret."""
    if not value:
        return ""
    return value[: min(visible, len(value))] + "..."
