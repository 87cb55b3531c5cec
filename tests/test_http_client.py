"""Tests for gkcli.api.http (request core, auth schemes, record parsing)."""

from unittest.mock import Mock, patch

import pytest
import requests
from pydantic import BaseModel
from requests.auth import HTTPBasicAuth

from gkcli.api.http import BearerAuth, HTTPClient, TokenAuth, parse_record, parse_records
from gkcli.errors import APIError, NetworkError, ProviderError


def _response(status: int, data=None, text: str = "") -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = data
    resp.text = text
    resp.content = b"" if status == 204 else b"{}"
    return resp


@pytest.fixture
def client() -> HTTPClient:
    return HTTPClient("https://api.example.com/", TokenAuth("secret-token"))


def _authorization(auth) -> str:
    prepared = requests.Request("GET", "https://api.example.com/x").prepare()
    return auth(prepared).headers["Authorization"]


def test_token_auth_header() -> None:
    """TokenAuth sends 'token <value>' (GitHub)."""
    assert _authorization(TokenAuth("abc")) == "token abc"


def test_bearer_auth_header() -> None:
    """BearerAuth sends 'Bearer <value>' (GitLab)."""
    assert _authorization(BearerAuth("abc")) == "Bearer abc"


def test_basic_auth_header() -> None:
    """Basic auth sends base64(username:secret) (Bitbucket)."""
    assert _authorization(HTTPBasicAuth("user", "pw")) == "Basic dXNlcjpwdw=="


def test_get_returns_decoded_json(client: HTTPClient) -> None:
    """Successful GET returns the decoded body and joins base URL and path."""
    with patch.object(client._session, "request", return_value=_response(200, {"ok": True})) as req:
        data = client.get("/repos/o/r", params={"state": "open"})

    assert data == {"ok": True}
    req.assert_called_once_with(
        "GET",
        "https://api.example.com/repos/o/r",
        params={"state": "open"},
        json=None,
        timeout=30,
    )


def test_post_sends_json_body(client: HTTPClient) -> None:
    """POST passes the payload as JSON."""
    with patch.object(client._session, "request", return_value=_response(201, {"id": 1})) as req:
        client.post("items", json={"name": "x"})
    assert req.call_args[0][1] == "https://api.example.com/items"
    assert req.call_args[1]["json"] == {"name": "x"}


def test_error_status_raises_api_error_with_body(client: HTTPClient) -> None:
    """Status >= 400 raises APIError carrying status and raw body."""
    with patch.object(client._session, "request", return_value=_response(404, text="Not Found")):
        with pytest.raises(APIError) as exc_info:
            client.get("/missing")

    err = exc_info.value
    assert err.status_code == 404
    assert err.body == "Not Found"
    assert "404" in str(err)
    assert isinstance(err, ProviderError)


def test_transport_failure_raises_network_error(client: HTTPClient) -> None:
    """Connection errors become NetworkError; nothing is retried."""
    with patch.object(client._session, "request", side_effect=requests.ConnectionError("refused")) as req:
        with pytest.raises(NetworkError):
            client.get("/x")
    assert req.call_count == 1


def test_no_content_returns_none(client: HTTPClient) -> None:
    """204 responses decode to None."""
    with patch.object(client._session, "request", return_value=_response(204)):
        assert client.delete("/x") is None


def test_invalid_json_raises_provider_error(client: HTTPClient) -> None:
    """A 2xx body that is not JSON is a ProviderError, not an APIError."""
    resp = _response(200)
    resp.json.side_effect = ValueError("no json")
    with patch.object(client._session, "request", return_value=resp):
        with pytest.raises(ProviderError) as exc_info:
            client.get("/x")
    assert not isinstance(exc_info.value, APIError)


def test_custom_headers_override_accept() -> None:
    """Extra headers are merged into the session."""
    client = HTTPClient("https://api.example.com", TokenAuth("t"), headers={"Accept": "application/vnd.test+json"})
    assert client._session.headers["Accept"] == "application/vnd.test+json"
    assert client.base_url == "https://api.example.com"


class _Record(BaseModel):
    id: int
    name: str = ""


def test_parse_record_schema_mismatch_raises_provider_error() -> None:
    """Validation failures surface as ProviderError."""
    with pytest.raises(ProviderError, match="_Record"):
        parse_record(_Record, {"name": "no id"})


def test_parse_records_handles_none_and_rejects_non_list() -> None:
    """None is an empty list; a dict where a list is expected is an error."""
    assert parse_records(_Record, None) == []
    assert [r.id for r in parse_records(_Record, [{"id": 1}, {"id": 2}])] == [1, 2]
    with pytest.raises(ProviderError):
        parse_records(_Record, {"id": 1})
