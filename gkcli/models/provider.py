"""Supported Git hosting providers."""

from enum import Enum


class ProviderName(str, Enum):
    """Provider tags. Lookup by value is case-insensitive."""

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"

    @classmethod
    def _missing_(cls, value: object) -> "ProviderName | None":
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None
