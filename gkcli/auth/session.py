"""Authentication session for the aggregating service.

Owns the login flow (browser + local callback listener), the persisted
token and its transparent refresh. One AuthSession per caller; nothing here
is module-global.
"""

import logging
import threading
import webbrowser
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from gkcli.auth.callback_server import CallbackListener
from gkcli.auth.oauth import OAuthClient, generate_state
from gkcli.auth.token_store import TokenStore
from gkcli.config import OAuthSettings
from gkcli.errors import AuthenticationError
from gkcli.models import AuthToken
from gkcli.utils import utc_now

LOG = logging.getLogger("gkcli.auth.session")

NOT_AUTHENTICATED = "not authenticated, run 'gk login'"


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    AWAITING_CALLBACK = "awaiting_callback"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


class AuthSession:
    """Login, token access with refresh, and logout.

    get_token holds one lock across the expiry check and the refresh, so
    concurrent callers wait for a single refresh and then see its result.
    """

    def __init__(
        self,
        oauth_client: OAuthClient,
        token_store: TokenStore,
        settings: OAuthSettings,
        open_browser: Callable[[str], bool] = webbrowser.open,
        clock: Callable[[], datetime] = utc_now,
        listener_factory: Callable[..., CallbackListener] = CallbackListener,
    ) -> None:
        self._oauth = oauth_client
        self._store = token_store
        self._settings = settings
        self._open_browser = open_browser
        self._clock = clock
        self._listener_factory = listener_factory
        self._lock = threading.Lock()
        self._login_lock = threading.Lock()
        self._state = SessionState.AUTHENTICATED if token_store.load() else SessionState.LOGGED_OUT

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._store.load() is not None

    def current_token(self) -> AuthToken | None:
        """Stored token as is, without refreshing."""
        return self._store.load()

    def login(self) -> AuthToken:
        """Run the authorization-code flow and persist the resulting token.

        Raises AuthTimeoutError when no valid callback arrives within
        login_timeout, AuthenticationError for every other failure.
        """
        if not self._login_lock.acquire(blocking=False):
            raise AuthenticationError("A login is already in progress")
        previous = self._state
        completed = False
        state = generate_state()
        listener = self._listener_factory(
            state,
            host=self._settings.callback_host,
            port=self._settings.callback_port,
        )
        try:
            listener.start()
            self._state = SessionState.AWAITING_CALLBACK
            LOG.info("Starting login, waiting for browser callback on port %s", listener.port)
            self._launch_browser(self._oauth.authorization_url(state))

            code = listener.wait(timeout=self._settings.login_timeout)
            token = self._oauth.exchange_code(code)
            with self._lock:
                self._store.save(token)
                self._state = SessionState.AUTHENTICATED
            completed = True
            LOG.info("Login complete")
            return token
        finally:
            listener.stop()
            if not completed:
                self._state = previous
            self._login_lock.release()

    def _launch_browser(self, url: str) -> None:
        print("Opening browser for authentication...")
        try:
            opened = self._open_browser(url)
        except webbrowser.Error as e:
            LOG.warning("Could not open browser: %s", e)
            opened = False
        if not opened:
            print(f"Please open the following URL in your browser:\n{url}")

    def get_token(self) -> str:
        """Return a valid access token, refreshing it first when it is about to expire."""
        window = timedelta(seconds=self._settings.refresh_window)
        with self._lock:
            token = self._store.load()
            if token is None:
                self._state = SessionState.LOGGED_OUT
                raise AuthenticationError(NOT_AUTHENTICATED)
            if not token.expires_within(window, now=self._clock()):
                return token.access_token

            if not token.refresh_token:
                raise AuthenticationError("Token expired and no refresh token is available; run 'gk login' again")

            self._state = SessionState.REFRESHING
            LOG.info("Access token expires at %s, refreshing", token.expires_at)
            try:
                refreshed = self._oauth.refresh(token.refresh_token)
            except AuthenticationError as e:
                raise AuthenticationError(f"{e}; run 'gk login' to re-authenticate") from e
            finally:
                self._state = SessionState.AUTHENTICATED
            self._store.save(refreshed)
            LOG.info("Token refreshed")
            return refreshed.access_token

    def logout(self) -> None:
        """Forget the stored token. Safe to call when already logged out."""
        with self._lock:
            self._store.clear()
            self._state = SessionState.LOGGED_OUT
        LOG.info("Logged out")
