"""HTTP request core shared by the provider clients.

One requests.Session per client, provider-specific Authorization header,
JSON bodies, a bounded timeout and no retries. Non-2xx responses become
APIError with the raw body; transport failures become NetworkError.
"""

import logging
from typing import Any, Dict, List, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError
from requests.auth import AuthBase

from gkcli.errors import APIError, NetworkError, ProviderError

LOG = logging.getLogger("gkcli.api.http")

DEFAULT_TIMEOUT = 30

M = TypeVar("M", bound=BaseModel)

class TokenAuth(AuthBase):
    """GitHub style: ``Authorization: token <token>``."""

    scheme = "token"

    def __init__(self, token: str) -> None:
        self._token = token

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.headers["Authorization"] = f"{self.scheme} {self._token}"
        return r

class BearerAuth(TokenAuth):
    """GitLab style: ``Authorization: Bearer <token>``."""

    scheme = "Bearer"


class HTTPClient:
    """Authenticated JSON client rooted at one provider base URL."""

    def __init__(
        self,
        base_url: str,
        auth: AuthBase,
        headers: Dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.auth = auth
        self._session.headers["Accept"] = "application/json"
        if headers:
            self._session.headers.update(headers)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}" if path.startswith("/") else f"{self._base_url}/{path}"

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty)."""
        url = self._url(path)
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=self._timeout)
        except requests.RequestException as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e
        LOG.debug("%s %s -> %s", method, url, resp.status_code)
        if resp.status_code >= 400:
            raise APIError(resp.status_code, resp.text or "", method=method, url=url)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(f"{method} {url}: response is not valid JSON") from e

    def get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self) -> None:
        self._session.close()

def parse_record(model: Type[M], data: Any) -> M:
    """Validate one native record; schema mismatches become ProviderError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ProviderError(f"Unexpected {model.__name__} payload: {e}") from e

def parse_records(model: Type[M], data: Any) -> List[M]:
    """Validate a JSON array of native records (None means empty)."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise ProviderError(f"Expected a list of {model.__name__}, got {type(data).__name__}")
    return [parse_record(model, d) for d in data]
