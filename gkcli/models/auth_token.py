"""Access token for the aggregating service."""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field, field_serializer, field_validator


class AuthToken(BaseModel):
    """Access token, refresh token and absolute expiry."""

    access_token: str = Field(..., min_length=1, repr=False)
    refresh_token: str = Field(default="", repr=False)
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_serializer("expires_at")
    def _to_rfc3339(self, value: datetime | None) -> str | None:
        if value is None:
            return None
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def expires_within(self, window: timedelta, now: datetime) -> bool:
        """True when the token is expired or expires within window of now.

        Tokens without an expiry never need a refresh.
        """
        if self.expires_at is None:
            return False
        return now >= self.expires_at - window
