"""Persistence of the login token.

The session only talks to the TokenStore interface; YamlTokenStore keeps the
token under an ``auth:`` key of a YAML file and leaves other keys alone.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

import yaml
from pydantic import ValidationError

from gkcli.models import AuthToken

LOG = logging.getLogger("gkcli.auth.token_store")

AUTH_KEY = "auth"


class TokenStore(ABC):
    """Where the session keeps its AuthToken between invocations."""

    @abstractmethod
    def load(self) -> AuthToken | None:
        """Return the stored token, or None when logged out."""
        ...

    @abstractmethod
    def save(self, token: AuthToken) -> None:
        """Persist token, replacing any previous one."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored token. Must succeed when nothing is stored."""
        ...


class YamlTokenStore(TokenStore):
    """Token in ``<path>`` as ``auth: {access_token, refresh_token, expires_at}``."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict:
        if not self._path.is_file():
            return {}
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            LOG.warning("Ignoring unreadable token file %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        raw = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(raw)

    def load(self) -> AuthToken | None:
        auth = self._read().get(AUTH_KEY)
        if not isinstance(auth, dict) or not auth.get("access_token"):
            return None
        try:
            return AuthToken.model_validate(auth)
        except ValidationError as e:
            LOG.warning("Ignoring invalid token in %s: %s", self._path, e)
            return None

    def save(self, token: AuthToken) -> None:
        data = self._read()
        data[AUTH_KEY] = token.model_dump(mode="json")
        self._write(data)
        LOG.debug("Saved token to %s", self._path)

    def clear(self) -> None:
        data = self._read()
        if AUTH_KEY not in data:
            return
        del data[AUTH_KEY]
        self._write(data)
        LOG.debug("Cleared token in %s", self._path)
