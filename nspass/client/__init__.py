"""
nspass.client - Network Execution Core

HTTP client, shared API configuration and client session handling.
"""

from nspass.client.config import ApiConfig
from nspass.client.http import HttpClient
from nspass.client.session import SessionGuard
from nspass.client.storage import (
    InMemorySessionStore,
    JsonFileSessionStore,
    SessionStore,
    clear_session,
)

__all__ = [
    "ApiConfig",
    "HttpClient",
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "SessionGuard",
    "SessionStore",
    "clear_session",
]
