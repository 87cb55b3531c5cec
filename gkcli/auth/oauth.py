"""OAuth 2.0 authorization-code flow against the aggregating service.

Builds the authorization URL, exchanges the code for tokens and refreshes
them, using Authlib's requests-based OAuth2Session. Nothing here is retried:
authorization codes and refresh tokens are single-use.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

import requests
from authlib.integrations.base_client import OAuthError
from authlib.integrations.requests_client import OAuth2Session

from gkcli.config import OAuthSettings
from gkcli.errors import AuthenticationError
from gkcli.models import AuthToken

LOG = logging.getLogger("gkcli.auth.oauth")

STATE_BYTES = 32
TOKEN_REQUEST_TIMEOUT = 30


def generate_state() -> str:
    """Random CSRF state: 32 bytes, URL-safe base64."""
    return secrets.token_urlsafe(STATE_BYTES)


def token_from_response(raw: Mapping[str, Any], previous_refresh_token: str = "") -> AuthToken:
    """Turn a token endpoint response into an AuthToken.

    Uses ``expires_at`` (epoch seconds, set by Authlib) or ``expires_in``.
    A response without a refresh token keeps the previous one.
    """
    access_token = raw.get("access_token")
    if not access_token:
        raise AuthenticationError("Token response did not contain an access token")

    expires_at = None
    if raw.get("expires_at"):
        expires_at = datetime.fromtimestamp(int(raw["expires_at"]), tz=timezone.utc)
    elif raw.get("expires_in"):
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(raw["expires_in"]))

    return AuthToken(
        access_token=access_token,
        refresh_token=raw.get("refresh_token") or previous_refresh_token,
        expires_at=expires_at,
    )


class OAuthClient:
    """Talks to the authorization and token endpoints for one client id."""

    def __init__(self, settings: OAuthSettings, client_secret: str | None = None) -> None:
        self._settings = settings
        self._client_secret = client_secret if client_secret is not None else settings.client_secret

    @property
    def settings(self) -> OAuthSettings:
        return self._settings

    def _session(self) -> OAuth2Session:
        return OAuth2Session(
            client_id=self._settings.client_id,
            client_secret=self._client_secret,
            scope=self._settings.scopes,
            redirect_uri=self._settings.redirect_uri,
        )

    def authorization_url(self, state: str) -> str:
        """Authorization URL embedding state, asking for offline access (refresh token)."""
        with self._session() as session:
            url, _ = session.create_authorization_url(
                self._settings.authorize_url,
                state=state,
                access_type="offline",
            )
        return url

    def exchange_code(self, code: str) -> AuthToken:
        """Exchange an authorization code for access + refresh token."""
        LOG.debug("Exchanging authorization code at %s", self._settings.token_url)
        with self._session() as session:
            try:
                raw = session.fetch_token(
                    self._settings.token_url,
                    code=code,
                    timeout=TOKEN_REQUEST_TIMEOUT,
                )
            except (OAuthError, requests.RequestException) as e:
                raise AuthenticationError(f"Failed to exchange authorization code: {e}") from e
        return token_from_response(raw)

    def refresh(self, refresh_token: str) -> AuthToken:
        """Exchange a refresh token for a new access/refresh pair."""
        LOG.debug("Refreshing access token at %s", self._settings.token_url)
        with self._session() as session:
            try:
                raw = session.refresh_token(
                    self._settings.token_url,
                    refresh_token=refresh_token,
                    timeout=TOKEN_REQUEST_TIMEOUT,
                )
            except (OAuthError, requests.RequestException) as e:
                raise AuthenticationError(f"Failed to refresh token: {e}") from e
        return token_from_response(raw, previous_refresh_token=refresh_token)
