"""Configuration loading from YAML and environment.

Secrets (provider tokens, OAuth client secret) are taken from the config
file, environment variables or from files named by ``*_FILE`` variables
(Docker secrets).
"""

import os
from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = Path.home() / ".config" / "gk"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"
DEFAULT_TOKEN_FILE = CONFIG_DIR / "auth.yaml"


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so resolvers can read env/file
_current_env: dict[str, str] = {}


def _is_placeholder(value: str | None) -> bool:
    return not value or value.startswith("${")


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="Personal access token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")


class GitLabConfig(BaseSettings):
    """GitLab API settings."""

    model_config = SettingsConfigDict(env_prefix="GITLAB_", extra="ignore")

    token: str | None = Field(default=None, description="Personal access token")
    api_url: str = Field(default="https://gitlab.com/api/v4", description="API base URL")


class BitbucketConfig(BaseSettings):
    """Bitbucket API settings."""

    model_config = SettingsConfigDict(env_prefix="BITBUCKET_", extra="ignore")

    username: str | None = Field(default=None, description="Bitbucket username")
    app_password: str | None = Field(default=None, description="App password; use env or secret file")
    api_url: str = Field(default="https://api.bitbucket.org/2.0", description="API base URL")


class OAuthSettings(BaseSettings):
    """OAuth settings for logging in to the aggregating service."""

    model_config = SettingsConfigDict(env_prefix="GK_OAUTH_", extra="ignore")

    client_id: str | None = Field(default=None, description="OAuth client id")
    client_secret: str | None = Field(default=None, description="OAuth client secret; prefer env or secret file")
    authorize_url: str = Field(default="https://app.gitkraken.com/oauth/authorize")
    token_url: str = Field(default="https://app.gitkraken.com/oauth/token")
    api_url: str = Field(default="https://api.gitkraken.com/v1", description="Service REST API base URL")
    scopes: List[str] = Field(default_factory=lambda: ["read", "write"])
    callback_host: str = Field(default="localhost", description="Interface the callback listener binds")
    callback_port: int = Field(default=1314, ge=0, le=65535, description="Fixed callback port")
    login_timeout: float = Field(default=300, gt=0, description="Seconds to wait for the browser callback")
    refresh_window: float = Field(default=300, ge=0, description="Refresh when expiry is this close (seconds)")

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.callback_port}/callback"


class LaunchpadConfig(BaseSettings):
    """Cross-repository aggregation settings."""

    model_config = SettingsConfigDict(env_prefix="LAUNCHPAD_", extra="ignore")

    max_workers: int = Field(default=8, ge=1, le=64, description="Concurrent repository fetches")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class RepositoryEntry(BaseModel):
    """Repository to aggregate: display name and git remote URL."""

    name: str = ""
    remote: str = ""


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    gitlab: GitLabConfig = Field(default_factory=GitLabConfig)
    bitbucket: BitbucketConfig = Field(default_factory=BitbucketConfig)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    launchpad: LaunchpadConfig = Field(default_factory=LaunchpadConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    repositories: List[RepositoryEntry] = Field(default_factory=list)
    token_file: Path = Field(default=DEFAULT_TOKEN_FILE, description="Where the login token is stored")

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if not _is_placeholder(t):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    @property
    def gitlab_token_resolved(self) -> str | None:
        """Resolve GitLab token from config, env or Docker secret file."""
        t = self.gitlab.token
        if not _is_placeholder(t):
            return t
        return _read_secret("GITLAB_TOKEN", "GITLAB_TOKEN_FILE")

    @property
    def bitbucket_app_password_resolved(self) -> str | None:
        """Resolve Bitbucket app password from config, env or Docker secret file."""
        p = self.bitbucket.app_password
        if not _is_placeholder(p):
            return p
        return _read_secret("BITBUCKET_APP_PASSWORD", "BITBUCKET_APP_PASSWORD_FILE")

    @property
    def oauth_client_secret_resolved(self) -> str | None:
        """Resolve OAuth client secret from config, env or Docker secret file."""
        s = self.oauth.client_secret
        if not _is_placeholder(s):
            return s
        return _read_secret("GK_OAUTH_CLIENT_SECRET", "GK_OAUTH_CLIENT_SECRET_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        # Simple $VAR
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing file yields defaults (plus whatever the environment sets).
    Secrets: GITHUB_TOKEN, GITLAB_TOKEN, BITBUCKET_APP_PASSWORD,
    GK_OAUTH_CLIENT_SECRET, each also as a *_FILE variant.
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or DEFAULT_CONFIG_PATH
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    raw = _substitute_env(raw)

    # Build nested models from raw dict
    github = GitHubConfig(**(raw.get("github") or {}))
    gitlab = GitLabConfig(**(raw.get("gitlab") or {}))
    bitbucket = BitbucketConfig(**(raw.get("bitbucket") or {}))
    oauth = OAuthSettings(**(raw.get("oauth") or {}))
    launchpad = LaunchpadConfig(**(raw.get("launchpad") or {}))
    logging = LoggingConfig(**(raw.get("logging") or {}))
    repositories = [RepositoryEntry(**entry) for entry in raw.get("repositories") or []]

    extra: dict[str, Any] = {}
    if raw.get("token_file"):
        extra["token_file"] = Path(raw["token_file"]).expanduser()

    return AppConfig(
        github=github,
        gitlab=gitlab,
        bitbucket=bitbucket,
        oauth=oauth,
        launchpad=launchpad,
        logging=logging,
        repositories=repositories,
        **extra,
    )
