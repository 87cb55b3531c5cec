from gkcli.auth.callback_server import CallbackListener
from gkcli.auth.oauth import OAuthClient, generate_state
from gkcli.auth.session import AuthSession, SessionState
from gkcli.auth.token_store import TokenStore, YamlTokenStore

__all__ = [
    "AuthSession",
    "CallbackListener",
    "OAuthClient",
    "SessionState",
    "TokenStore",
    "YamlTokenStore",
    "generate_state",
]
