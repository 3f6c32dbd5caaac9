"""
nspass.exceptions - Custom exceptions for the data layer

Runtime failures (network, HTTP, server-reported) are returned as
StandardResult values and never raised. The exceptions below cover
programmer errors and configuration problems, plus the error value the
collection orchestrator stores in its state.

Example:
    >>> from nspass.exceptions import AdapterConfigError
    >>>
    >>> try:
    ...     adapter = create_adapter(service, {"get_list": "missing"})
    ... except AdapterConfigError as e:
    ...     logger.error(f"Bad adapter mapping: {e}")
"""


class NspassError(Exception):
    """Base exception for all nspass errors."""


class ConfigurationError(NspassError):
    """
    Raised when client configuration is invalid.

    This can occur due to:
    - Empty base URL
    - Non-positive timeout
    """


class AdapterConfigError(NspassError):
    """
    Raised when a service adapter is built from a malformed mapping.

    This can occur due to:
    - Unknown verb names in the mapping or transformer tables
    - Mapped method missing on the wrapped service
    - Mapped attribute that is not callable
    """


class SessionStoreError(NspassError):
    """Raised when the persistent session store cannot be read or written."""


class CollectionError(NspassError):
    """
    Failure recorded in a collection's ``error`` state.

    Never raised by the orchestrator itself; it is stored as a value so
    view code can render it next to the stale-but-visible data.
    """

    def __init__(self, message: str, error_code: str | None = None) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


__all__ = [
    "AdapterConfigError",
    "CollectionError",
    "ConfigurationError",
    "NspassError",
    "SessionStoreError",
]
