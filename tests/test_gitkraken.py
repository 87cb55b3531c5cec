"""Tests for gkcli.api.gitkraken (service API client authenticated by the login session)."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from gkcli.api.gitkraken import GITKRAKEN_API_URL, GitKrakenClient
from gkcli.auth.session import NOT_AUTHENTICATED, AuthSession
from gkcli.auth.token_store import YamlTokenStore
from gkcli.config import OAuthSettings
from gkcli.errors import APIError, AuthenticationError
from gkcli.models import AuthToken


def _response(status: int, data=None, text: str = "") -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = data
    resp.text = text
    resp.content = b"" if data is None else b"{}"
    return resp


@pytest.fixture
def session() -> Mock:
    session = Mock(spec=AuthSession)
    session.get_token.return_value = "access-1"
    return session


@pytest.fixture
def client(session: Mock) -> GitKrakenClient:
    client = GitKrakenClient(session, api_url="https://api.example.com/v1")
    yield client
    client.close()


def test_default_api_url() -> None:
    """Without an explicit URL the client targets the public service API."""
    assert GitKrakenClient(Mock(spec=AuthSession)).base_url == GITKRAKEN_API_URL


def test_get_sends_bearer_token_from_session(client: GitKrakenClient, session: Mock) -> None:
    """The Authorization header carries the session's access token."""
    with patch.object(client._session, "send", return_value=_response(200, {"patches": []})) as send:
        data = client.get("/patches")

    prepared = send.call_args[0][0]
    assert prepared.method == "GET"
    assert prepared.url == "https://api.example.com/v1/patches"
    assert prepared.headers["Authorization"] == "Bearer access-1"
    assert data == {"patches": []}
    session.get_token.assert_called_once_with()


def test_token_is_read_for_every_request(client: GitKrakenClient, session: Mock) -> None:
    """A refreshed token is picked up by the next request."""
    session.get_token.side_effect = ["access-1", "access-2"]
    with patch.object(client._session, "send", return_value=_response(200, {})) as send:
        client.get("/a")
        client.get("/b")

    headers = [c[0][0].headers["Authorization"] for c in send.call_args_list]
    assert headers == ["Bearer access-1", "Bearer access-2"]


def test_not_logged_in_never_sends(client: GitKrakenClient, session: Mock) -> None:
    """Without a login the request fails with AuthenticationError instead of going out anonymously."""
    session.get_token.side_effect = AuthenticationError(NOT_AUTHENTICATED)
    with patch.object(client._session, "send") as send:
        with pytest.raises(AuthenticationError, match="not authenticated"):
            client.get("/patches")
    send.assert_not_called()


def test_post_patch_delete(client: GitKrakenClient) -> None:
    """Write methods send JSON bodies with the same bearer header."""
    with patch.object(client._session, "send", return_value=_response(200, {"id": "p1"})) as send:
        assert client.post("/patches", json={"name": "fix"}) == {"id": "p1"}
        client.patch("/patches/p1", json={"name": "fix-2"})
    with patch.object(client._session, "send", return_value=_response(204)) as delete:
        assert client.delete("/patches/p1") is None

    post, patch_req = (c[0][0] for c in send.call_args_list)
    assert post.method == "POST"
    assert json.loads(post.body) == {"name": "fix"}
    assert patch_req.method == "PATCH"
    assert delete.call_args[0][0].method == "DELETE"
    assert delete.call_args[0][0].headers["Authorization"] == "Bearer access-1"


def test_error_status_raises_api_error(client: GitKrakenClient) -> None:
    """Non-2xx responses surface as APIError with the raw body."""
    with patch.object(client._session, "send", return_value=_response(404, text="no such patch")):
        with pytest.raises(APIError) as exc_info:
            client.get("/patches/missing")
    assert exc_info.value.status_code == 404


def test_uses_stored_login(tmp_path: Path) -> None:
    """A real AuthSession supplies the stored, unexpired access token."""
    store = YamlTokenStore(tmp_path / "auth.yaml")
    store.save(AuthToken(access_token="stored", expires_at=datetime.now(timezone.utc) + timedelta(hours=1)))
    client = GitKrakenClient(AuthSession(Mock(), store, OAuthSettings()), api_url="https://api.example.com/v1")

    with patch.object(client._session, "send", return_value=_response(200, {})) as send:
        client.get("/me")

    assert send.call_args[0][0].headers["Authorization"] == "Bearer stored"
    client.close()
