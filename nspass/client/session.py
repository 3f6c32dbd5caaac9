"""
nspass.client.session - Credential access and 401 session teardown

SessionGuard reads the bearer credential for outgoing requests and tears
the session down when the backend answers 401: every persisted session
entry is cleared and the sign-in redirect fires.

Teardown fires at most once per expired session. The guard stays tripped
until a credential is read again for an outgoing request, so a burst of
concurrent 401s produces a single redirect.
"""

import logging
from collections.abc import Callable

from nspass.client.storage import TOKEN_KEY, SessionStore, clear_session
from nspass.exceptions import SessionStoreError

logger = logging.getLogger(__name__)

# Receives the sign-in path; hosts wire this to their navigation layer
SignInRedirect = Callable[[str], None]


def _log_redirect(sign_in_path: str) -> None:
    logger.warning("Session expired, sign in again at %s", sign_in_path)


class SessionGuard:
    """
    Owns the client side of the session lifecycle.

    Example:
        >>> guard = SessionGuard(store, sign_in_path="/login", redirect=router.go)
        >>> token = guard.credential()
        >>> guard.handle_unauthorized()  # on 401
        True
    """

    def __init__(
        self,
        store: SessionStore,
        sign_in_path: str = "/login",
        redirect: SignInRedirect | None = None,
    ) -> None:
        self._store = store
        self._sign_in_path = sign_in_path
        self._redirect = redirect or _log_redirect
        self._tripped = False

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def tripped(self) -> bool:
        """True while the session is torn down and no new credential has been seen."""
        return self._tripped

    def credential(self) -> str | None:
        """Return the stored bearer credential, if any."""
        token = self._store.get(TOKEN_KEY)
        if token:
            self._tripped = False
        return token or None

    def handle_unauthorized(self) -> bool:
        """
        Clear the session and redirect to sign-in.

        Returns:
            True if teardown ran, False if it already ran for this session.
        """
        if self._tripped:
            logger.debug("Session already torn down, ignoring repeated 401")
            return False
        self._tripped = True

        try:
            removed = clear_session(self._store)
        except SessionStoreError:
            logger.error("Could not clear local session", exc_info=True)
            removed = []
        logger.warning(
            "Received 401, cleared local session",
            extra={"removed_keys": removed, "sign_in_path": self._sign_in_path},
        )
        try:
            self._redirect(self._sign_in_path)
        except Exception:
            logger.error("Sign-in redirect failed", exc_info=True)
        return True
