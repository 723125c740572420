"""Async adapter for the remote booking service.

Attaches the session's bearer credential, classifies every response into a
tagged result, and turns timeouts and network errors into ``Corrupt``.
Nothing here retries: a create that times out may or may not have been
applied, and the service gives no idempotency guarantee.
"""
import logging
from typing import Any, Optional
from urllib.parse import urljoin

import httpx

from londonpark.boundary.envelope import BoundaryResult, Corrupt, Ok, parse_envelope
from londonpark.boundary.operations import Operation, endpoint_for
from londonpark.config import settings
from londonpark.errors import SessionInvalid
from londonpark.models.kinds import EntityKind
from londonpark.models.session import LOGIN_ROUTES, Role, Session

logger = logging.getLogger(__name__)

_EXCERPT = 200


class BoundaryClient:
    """Request/response operations against the booking service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or settings.BOUNDARY_BASE_URL
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.BOUNDARY_TIMEOUT_SECONDS,
            transport=transport,
        )

    def resolve_url(self, reference: Optional[str]) -> Optional[str]:
        """Absolute URL for a stored file reference such as an adult photo."""
        if not reference:
            return None
        if reference.startswith(("http://", "https://")):
            return reference
        base = self.base_url if self.base_url.endswith("/") else self.base_url + "/"
        return urljoin(base, reference.lstrip("/"))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BoundaryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def call(
        self,
        kind: EntityKind,
        operation: Operation,
        session: Optional[Session] = None,
        payload: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, tuple]] = None,
    ) -> BoundaryResult:
        """Issue one operation and classify the response.

        Raises SessionInvalid before sending if the operation needs a
        session the caller does not hold, and after receiving a 401/403.
        """
        endpoint = endpoint_for(kind, operation)
        headers: dict[str, str] = {}
        if endpoint.role is not None:
            if session is None:
                raise SessionInvalid("Login required", LOGIN_ROUTES[endpoint.role])
            session.require(endpoint.role)
        if session is not None:
            headers.update(session.auth_headers())

        try:
            if endpoint.method == "GET":
                response = await self._client.get(endpoint.path, headers=headers)
            elif endpoint.multipart:
                response = await self._client.post(
                    endpoint.path, data=payload or {}, files=files or None, headers=headers
                )
            else:
                response = await self._client.post(endpoint.path, json=payload or {}, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("Timeout calling %s: %s", endpoint.path, exc)
            return Corrupt(reason=f"timeout calling {endpoint.path}")
        except httpx.HTTPError as exc:
            logger.error("Network failure calling %s: %s", endpoint.path, exc)
            return Corrupt(reason=f"network failure calling {endpoint.path}")

        if response.status_code in (401, 403):
            role = session.role if session is not None else (endpoint.role or Role.user)
            logger.info("Session rejected by %s (HTTP %d)", endpoint.path, response.status_code)
            raise SessionInvalid("Session rejected by the booking service", LOGIN_ROUTES[role])
        if response.status_code == 204:
            return Ok()

        result = parse_envelope(response.text)
        if isinstance(result, Corrupt):
            logger.error(
                "Corrupt response from %s (HTTP %d): %s",
                endpoint.path,
                response.status_code,
                response.text[:_EXCERPT],
            )
        return result
