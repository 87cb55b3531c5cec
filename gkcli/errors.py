"""Error taxonomy shared by the provider layer and the auth session.

No retries happen anywhere below the CLI: every error here is surfaced to
the caller as-is.
"""


class GkError(Exception):
    """Base class for all gkcli errors."""

    pass


class ResolutionError(GkError):
    """Raised when a remote URL does not map to a supported provider."""

    pass


class ConfigurationError(GkError):
    """Raised when a provider is requested without its credential."""

    pass


class AuthenticationError(GkError):
    """Raised when the aggregating-service token cannot be obtained or renewed."""

    pass


class AuthTimeoutError(AuthenticationError, TimeoutError):
    """Raised when the browser callback does not arrive in time."""

    pass


class ProviderError(GkError):
    """Raised when a Git hosting provider call fails."""

    pass


class NetworkError(ProviderError):
    """Transport-level failure (DNS, connection, timeout) reaching a provider."""

    pass


class APIError(ProviderError):
    """Non-2xx response. Carries the status code and the raw body text."""

    def __init__(self, status_code: int, body: str, method: str = "", url: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url
        target = f" {method} {url}".rstrip() if method or url else ""
        super().__init__(f"API error ({status_code}){target}: {body}")
