"""One-shot loopback listener for the OAuth redirect.

Serves ``GET /callback`` until one request carrying the expected state
arrives, hands its authorization code to the waiting login and then shuts
itself down.
"""

import logging
import threading
from concurrent.futures import CancelledError, Future, InvalidStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, List
from urllib.parse import parse_qs, urlsplit

from gkcli.errors import AuthenticationError, AuthTimeoutError

LOG = logging.getLogger("gkcli.auth.callback")

CALLBACK_PATH = "/callback"
SUCCESS_HTML = "<html><body><h1>Success!</h1><p>You can close this window.</p></body></html>"
# Seconds a connection may sit idle before the handler drops it.
READ_TIMEOUT = 10


class _CallbackHTTPServer(ThreadingHTTPServer):
    """Thread-per-connection server that knows which listener it reports to.

    Browsers open speculative connections that never send a request; one
    thread per connection keeps those from blocking the real redirect or
    shutdown().
    """

    daemon_threads = True

    def __init__(self, address, handler, listener: "CallbackListener") -> None:
        self.listener = listener
        super().__init__(address, handler)


class CallbackHandler(BaseHTTPRequestHandler):
    """Handle GET /callback?code=...&state=..."""

    server: _CallbackHTTPServer
    timeout = READ_TIMEOUT

    def do_GET(self) -> None:
        parts = urlsplit(self.path)
        if parts.path != CALLBACK_PATH:
            self._reply(404, "Not found")
            return
        params = {k: v[0] for k, v in parse_qs(parts.query, keep_blank_values=True).items()}
        status, body = self.server.listener.handle_callback(params)
        content_type = "text/html; charset=utf-8" if status == 200 else "text/plain; charset=utf-8"
        self._reply(status, body, content_type)

    def _reply(self, status: int, body: str, content_type: str = "text/plain; charset=utf-8") -> None:
        data = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format: str, *args: Any) -> None:
        LOG.debug(format, *args)


class CallbackListener:
    """Local HTTP listener that waits for exactly one valid OAuth callback.

    Callbacks with the wrong state are answered with 400 and otherwise
    ignored; the listener keeps waiting for the legitimate redirect.
    """

    def __init__(self, expected_state: str, host: str = "localhost", port: int = 1314, shutdown_delay: float = 1.0):
        self._expected_state = expected_state
        self._host = host
        self._requested_port = port
        self._shutdown_delay = shutdown_delay
        self._result: Future = Future()
        self._rejected: List[str] = []
        self._server: _CallbackHTTPServer | None = None
        self._thread: threading.Thread | None = None
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def port(self) -> int:
        if self._server is None:
            return self._requested_port
        return self._server.server_address[1]

    @property
    def rejected(self) -> List[str]:
        return list(self._rejected)

    def start(self) -> "CallbackListener":
        """Bind the port and serve from a daemon thread."""
        try:
            self._server = _CallbackHTTPServer((self._host, self._requested_port), CallbackHandler, self)
        except OSError as e:
            raise AuthenticationError(
                f"Failed to start callback listener on {self._host}:{self._requested_port}: {e}"
            ) from e
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="gk-oauth-callback",
            daemon=True,
        )
        self._thread.start()
        LOG.debug("Callback listener on %s:%s", self._host, self.port)
        return self

    def handle_callback(self, params: dict) -> tuple[int, str]:
        """Validate one callback; return (status, body) for the HTTP reply."""
        if params.get("state") != self._expected_state:
            LOG.debug("Rejected callback with invalid state")
            self._rejected.append("invalid state")
            return 400, "Invalid state parameter"

        if params.get("error"):
            reason = params.get("error_description") or params["error"]
            self._fail(AuthenticationError(f"Authorization denied: {reason}"))
            return 400, f"Authorization failed: {reason}"

        code = params.get("code")
        if not code:
            self._fail(AuthenticationError("Missing authorization code in callback"))
            return 400, "Missing authorization code"

        try:
            self._result.set_result(code)
        except InvalidStateError:
            # Already resolved or cancelled; the first callback wins.
            LOG.debug("Ignoring duplicate callback")
            return 400, "Callback already received"
        self._schedule_stop()
        return 200, SUCCESS_HTML

    def _fail(self, error: AuthenticationError) -> None:
        try:
            self._result.set_exception(error)
        except InvalidStateError:
            LOG.debug("Ignoring callback after completion: %s", error)

    def _schedule_stop(self) -> None:
        with self._lock:
            if self._stopped or self._timer is not None:
                return
            self._timer = threading.Timer(self._shutdown_delay, self.stop)
            self._timer.daemon = True
            self._timer.start()

    def wait(self, timeout: float | None = None) -> str:
        """Block until a valid callback arrives; return its authorization code."""
        try:
            return self._result.result(timeout=timeout)
        except FutureTimeoutError:
            message = f"Timed out after {timeout:g}s waiting for the browser callback"
            if self._rejected:
                message += f" ({len(self._rejected)} callback(s) rejected: state mismatch)"
            raise AuthTimeoutError(message) from None
        except CancelledError:
            raise AuthenticationError("Callback listener stopped before a callback arrived") from None

    def stop(self) -> None:
        """Shut the server down and release the port. Safe to call more than once."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            timer = self._timer
        if timer is not None and timer is not threading.current_thread():
            timer.cancel()
        self._result.cancel()
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        LOG.debug("Callback listener stopped")

    def __enter__(self) -> "CallbackListener":
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()
