"""Tests for gkcli.auth.callback_server over a real loopback socket."""

import socket
import threading

import pytest
import requests

from gkcli.auth.callback_server import READ_TIMEOUT, SUCCESS_HTML, CallbackHandler, CallbackListener
from gkcli.errors import AuthenticationError, AuthTimeoutError

STATE = "expected-state"


@pytest.fixture
def http() -> requests.Session:
    session = requests.Session()
    session.trust_env = False  # never route loopback calls through a proxy
    yield session
    session.close()


@pytest.fixture
def listener() -> CallbackListener:
    listener = CallbackListener(STATE, host="127.0.0.1", port=0, shutdown_delay=0.05).start()
    yield listener
    listener.stop()


def _callback(http: requests.Session, listener: CallbackListener, path: str = "/callback", **params) -> requests.Response:
    return http.get(f"http://127.0.0.1:{listener.port}{path}", params=params, timeout=5)


def test_valid_callback_delivers_code(http: requests.Session, listener: CallbackListener) -> None:
    """Matching state and a code: 200 with the success page, wait returns the code."""
    resp = _callback(http, listener, code="auth-code", state=STATE)

    assert resp.status_code == 200
    assert resp.text == SUCCESS_HTML
    assert listener.wait(timeout=2) == "auth-code"


def test_state_mismatch_is_rejected_and_wait_times_out(http: requests.Session, listener: CallbackListener) -> None:
    """Wrong state gets 400; the listener keeps waiting and then times out."""
    resp = _callback(http, listener, code="stolen", state="attacker")

    assert resp.status_code == 400
    assert resp.text == "Invalid state parameter"
    with pytest.raises(AuthTimeoutError) as exc_info:
        listener.wait(timeout=0.2)
    assert "rejected" in str(exc_info.value)
    assert isinstance(exc_info.value, TimeoutError)
    assert isinstance(exc_info.value, AuthenticationError)


def test_mismatch_then_valid_callback_succeeds(http: requests.Session, listener: CallbackListener) -> None:
    """A forged callback does not abort the legitimate one."""
    assert _callback(http, listener, code="x", state="wrong").status_code == 400
    assert _callback(http, listener, code="real", state=STATE).status_code == 200
    assert listener.wait(timeout=2) == "real"
    assert listener.rejected == ["invalid state"]


def test_missing_code_fails_wait(http: requests.Session, listener: CallbackListener) -> None:
    """Matching state without a code: 400 and the wait fails."""
    resp = _callback(http, listener, state=STATE)

    assert resp.status_code == 400
    assert resp.text == "Missing authorization code"
    with pytest.raises(AuthenticationError, match="Missing authorization code"):
        listener.wait(timeout=2)


def test_provider_error_fails_wait(http: requests.Session, listener: CallbackListener) -> None:
    """An error parameter from the authorization server fails the wait."""
    resp = _callback(http, listener, state=STATE, error="access_denied")

    assert resp.status_code == 400
    with pytest.raises(AuthenticationError, match="access_denied"):
        listener.wait(timeout=2)


def test_other_paths_are_not_found(http: requests.Session, listener: CallbackListener) -> None:
    """Only /callback is served."""
    assert _callback(http, listener, path="/favicon.ico").status_code == 404


def test_stop_is_idempotent_and_cancels_wait() -> None:
    """stop() twice is fine; a pending wait then fails instead of hanging."""
    listener = CallbackListener(STATE, host="127.0.0.1", port=0).start()
    listener.stop()
    listener.stop()
    with pytest.raises(AuthenticationError):
        listener.wait(timeout=1)


def test_port_in_use_raises_authentication_error() -> None:
    """A second listener on a taken port fails to start."""
    with CallbackListener(STATE, host="127.0.0.1", port=0) as first:
        second = CallbackListener(STATE, host="127.0.0.1", port=first.port)
        with pytest.raises(AuthenticationError, match="callback listener"):
            second.start()


def test_idle_connection_does_not_block_callback(http: requests.Session, listener: CallbackListener) -> None:
    """A connection that never sends a request does not hold up the real redirect."""
    with socket.create_connection(("127.0.0.1", listener.port)):
        resp = _callback(http, listener, code="auth-code", state=STATE)

        assert resp.status_code == 200
        assert listener.wait(timeout=2) == "auth-code"


def test_idle_connection_does_not_block_stop() -> None:
    """stop() returns promptly while a connection sits idle."""
    listener = CallbackListener(STATE, host="127.0.0.1", port=0).start()
    with socket.create_connection(("127.0.0.1", listener.port)):
        stopper = threading.Thread(target=listener.stop, daemon=True)
        stopper.start()
        stopper.join(timeout=3)

        assert not stopper.is_alive()


def test_handler_drops_idle_connections() -> None:
    """Request reads time out instead of waiting forever."""
    assert CallbackHandler.timeout == READ_TIMEOUT == 10
