"""REST client for the aggregating service itself.

Requests carry ``Authorization: Bearer <token>`` with the token taken from
the AuthSession when each request is prepared, so an expiring token is
refreshed on the way. Without a login the request is never sent: the
session's AuthenticationError propagates instead.
"""

import requests
from requests.auth import AuthBase

from gkcli.api.http import HTTPClient
from gkcli.auth.session import AuthSession

GITKRAKEN_API_URL = "https://api.gitkraken.com/v1"


class SessionAuth(AuthBase):
    """Bearer scheme with the token from AuthSession.get_token()."""

    def __init__(self, session: AuthSession) -> None:
        self._session = session

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.headers["Authorization"] = f"Bearer {self._session.get_token()}"
        return r


class GitKrakenClient(HTTPClient):
    """JSON client for the service API; get/post/patch/delete come from HTTPClient."""

    def __init__(self, session: AuthSession, api_url: str = GITKRAKEN_API_URL) -> None:
        super().__init__(api_url, SessionAuth(session))
