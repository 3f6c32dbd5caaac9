"""
nspass.client.storage - Persistent client session storage

The credential and user record are written by an external auth
collaborator; the network core only reads the credential and clears the
whole session on 401.

Two stores are provided:
- InMemorySessionStore: process-local, used by tests and embedding code
- JsonFileSessionStore: JSON file on disk, used by the CLI
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from nspass.exceptions import SessionStoreError

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "user"
LOGIN_METHOD_KEY = "login_method"

# Auxiliary entries written by sign-in providers, e.g. oauth2_state
PROVIDER_PREFIXES: tuple[str, ...] = ("oauth2_",)

SESSION_KEYS: tuple[str, ...] = (TOKEN_KEY, USER_KEY, LOGIN_METHOD_KEY)


class SessionStore(ABC):
    """Key/value store holding the client session."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value for ``key`` or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return all stored keys."""


class InMemorySessionStore(SessionStore):
    """Session store backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileSessionStore(SessionStore):
    """
    Session store persisted as a flat JSON object.

    The file is re-read on every access so that a sign-in performed by
    another process is picked up immediately. Writes go through a temporary
    file and an atomic rename.

    Example:
        >>> store = JsonFileSessionStore("~/.nspass/session.json")
        >>> store.set("auth_token", "eyJhbGciOi...")
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise SessionStoreError(f"Cannot read session file {self._path}: {e}") from e
        if not isinstance(raw, dict):
            raise SessionStoreError(f"Session file {self._path} must contain a JSON object")
        return {str(k): str(v) for k, v in raw.items()}

    def _save(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise SessionStoreError(f"Cannot write session file {self._path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    def keys(self) -> list[str]:
        return list(self._load())


def is_session_key(key: str) -> bool:
    """True for the credential, the user record and provider-prefixed entries."""
    return key in SESSION_KEYS or key.startswith(PROVIDER_PREFIXES)


def clear_session(store: SessionStore) -> list[str]:
    """
    Remove every session entry from ``store``.

    Returns:
        The keys that were removed.
    """
    removed = [key for key in store.keys() if is_session_key(key)]
    for key in removed:
        store.remove(key)
    return removed
