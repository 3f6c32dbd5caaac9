"""
nspass.client.http - Network Execution Core

HttpClient performs one HTTP round trip per call and always returns an
already-normalized StandardResult. Nothing is raised to the caller and
nothing is retried: transport failures, timeouts and HTTP errors come back
as ``success=False`` results distinguished only by ``error_code``.

Error classification:
- NETWORK_ERROR: timeout, connection failure, broken transport
- REQUEST_ERROR: the request could not be built (bad URL, unserializable body)
- UNKNOWN_ERROR: anything else raised while performing the call
- UNAUTHORIZED: HTTP 401, after the session has been torn down
- HTTP_<status>: non-2xx without a usable body

Example:
    >>> client = HttpClient(ApiConfig.from_settings(), SessionGuard(store))
    >>> result = await client.get("/v1/routes", {"page": 1, "pageSize": 20})
    >>> if result.success:
    ...     print(result.data, result.pagination)
"""

import asyncio
import logging
from typing import Any

import httpx

from nspass.client.config import ApiConfig
from nspass.client.session import SessionGuard
from nspass.core.messages import ERROR_MESSAGES
from nspass.core.normalizer import http_failure, is_recognized_shape, normalize
from nspass.core.results import ErrorCode, QueryParams, StandardResult

logger = logging.getLogger(__name__)

_UNPARSEABLE = object()


class HttpClient:
    """
    Async HTTP client for the nspass backend.

    A fresh ``httpx.AsyncClient`` is opened per call so that base URL changes
    on the shared ApiConfig take effect on the very next request.

    Args:
        config: Shared configuration handle (base URL, timeout, auth endpoints).
        session: Guard providing the bearer credential and 401 teardown.
            Without one, requests are sent anonymously.
        timeout_seconds: Per-client timeout override.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        config: ApiConfig,
        session: SessionGuard | None = None,
        *,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._session = session
        self._timeout_override = timeout_seconds
        self._transport = transport

    @property
    def config(self) -> ApiConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_override or self._config.timeout_seconds

    def update_base_url(self, new_base_url: str) -> None:
        """Update the shared base URL (affects every client using this config)."""
        self._config.update_base_url(new_base_url)

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def build_url(self, endpoint: str) -> str:
        """Resolve ``endpoint`` against the current base URL."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self._config.base_url}/{endpoint.lstrip('/')}"

    @staticmethod
    def build_params(params: QueryParams | None) -> list[tuple[str, str]]:
        """
        Serialize query parameters.

        None values are skipped, booleans become ``true``/``false`` and
        list values repeat the key.
        """
        if not params:
            return []
        query: list[tuple[str, str]] = []
        for key, value in params.items():
            if value is None:
                continue
            values = value if isinstance(value, list | tuple) else [value]
            for item in values:
                if item is None:
                    continue
                if isinstance(item, bool):
                    query.append((key, "true" if item else "false"))
                else:
                    query.append((key, str(item)))
        return query

    def _build_headers(self, endpoint: str) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._session is not None and not self._config.is_auth_endpoint(endpoint):
            token = self._session.credential()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    async def get(self, endpoint: str, params: QueryParams | None = None) -> StandardResult[Any]:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, body: Any = None) -> StandardResult[Any]:
        return await self.request("POST", endpoint, body=body)

    async def put(self, endpoint: str, body: Any = None) -> StandardResult[Any]:
        return await self.request("PUT", endpoint, body=body)

    async def delete(self, endpoint: str) -> StandardResult[Any]:
        return await self.request("DELETE", endpoint)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: QueryParams | None = None,
        body: Any = None,
    ) -> StandardResult[Any]:
        """
        Perform one request and normalize the outcome.

        Suspends until the response arrives or the timeout expires; on
        expiry the in-flight request is cancelled.
        """
        timeout = self.timeout_seconds
        try:
            url = self.build_url(endpoint)
            headers = self._build_headers(endpoint)
            query = self.build_params(params)
            logger.debug("%s %s", method, url, extra={"method": method, "url": url})

            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await asyncio.wait_for(
                    client.request(
                        method,
                        url,
                        params=query or None,
                        json=body,
                        headers=headers,
                    ),
                    timeout=timeout,
                )
        except (TimeoutError, httpx.TimeoutException):
            logger.warning(
                f"{method} {endpoint} timed out after {timeout}s",
                extra={"method": method, "endpoint": endpoint, "timeout": timeout},
            )
            return StandardResult.fail(
                f"Request timed out after {timeout:g}s", ErrorCode.NETWORK_ERROR
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, TypeError, ValueError) as exc:
            logger.warning(
                f"{method} {endpoint} could not be built: {exc}",
                extra={"method": method, "endpoint": endpoint},
            )
            return StandardResult.fail(f"Invalid request: {exc}", ErrorCode.REQUEST_ERROR)
        except httpx.TransportError as exc:
            logger.warning(
                f"{method} {endpoint} failed: {exc!r}",
                extra={"method": method, "endpoint": endpoint},
            )
            return StandardResult.fail(
                ERROR_MESSAGES[ErrorCode.NETWORK_ERROR], ErrorCode.NETWORK_ERROR
            )
        except Exception as exc:
            logger.error(
                f"{method} {endpoint} raised unexpectedly",
                exc_info=True,
                extra={"method": method, "endpoint": endpoint},
            )
            return StandardResult.fail(str(exc) or "Unknown error", ErrorCode.UNKNOWN_ERROR)

        return self._handle_response(response)

    # ------------------------------------------------------------------
    # Response handling
    # ------------------------------------------------------------------

    def _handle_response(self, response: httpx.Response) -> StandardResult[Any]:
        status = response.status_code
        reason = response.reason_phrase
        body = self._decode(response)

        if status == 401:
            if self._session is not None:
                self._session.handle_unauthorized()
            message = None
            if body is not _UNPARSEABLE and is_recognized_shape(body):
                message = normalize(body).message
            return StandardResult.fail(
                message or ERROR_MESSAGES[ErrorCode.UNAUTHORIZED], ErrorCode.UNAUTHORIZED
            )

        if response.is_success:
            if not response.content:
                return StandardResult.ok()
            if body is _UNPARSEABLE:
                return http_failure(status, reason)
            if is_recognized_shape(body):
                return normalize(body, status, reason)
            # Bare payload (e.g. a plain JSON list)
            return StandardResult.ok(body)

        logger.warning(
            f"Request failed with HTTP {status}",
            extra={"status_code": status, "url": str(response.request.url)},
        )
        if body is _UNPARSEABLE or not is_recognized_shape(body):
            return http_failure(status, reason)
        result = normalize(body, status, reason)
        if result.success:
            # A non-2xx status is never a success, whatever the body claims
            return http_failure(status, reason)
        if result.error_code is None:
            return result.model_copy(update={"error_code": ErrorCode.http(status)})
        return result

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return _UNPARSEABLE
        try:
            return response.json()
        except ValueError:
            return _UNPARSEABLE
