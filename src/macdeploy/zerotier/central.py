"""ZeroTier Central API client for member authorization and naming.

Every call goes through :func:`call_with_retry`. The retry engine only
judges transport success; this module checks that the returned member
actually carries the requested change and raises
:class:`RemoteRejectionError` when it does not.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx
import structlog

from macdeploy.domain.errors import RemoteRejectionError, TransientNetworkError
from macdeploy.domain.models import CallResult
from macdeploy.resilience.retry import DEFAULT_MAX_ATTEMPTS, DEFAULT_TIMEOUT, call_with_retry

logger = structlog.get_logger()


class CentralClient:
    """Typed wrapper around the ZeroTier Central REST API.

    Args:
        client: An ``httpx.Client`` with ``base_url`` set to the API root and
            the bearer token header applied. See :meth:`create`.
        max_attempts: Attempts per call handed to the retry engine.
        timeout: Per-attempt timeout in seconds, applied by httpx to each
            phase of a request (connect, read, write, pool) rather than as a
            total deadline.
        sleep: Sleep function used between retries.
    """

    def __init__(
        self,
        client: httpx.Client,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._max_attempts = max_attempts
        self._timeout = timeout
        self._sleep = sleep

    @classmethod
    def create(cls, base_url: str, api_token: str, **kwargs: Any) -> CentralClient:
        """Build a client with its own ``httpx.Client`` for *base_url*."""
        http = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            },
        )
        return cls(http, **kwargs)

    def close(self) -> None:
        self._client.close()

    def _call(
        self,
        api_name: str,
        method: str,
        path: str,
        payload: Any = None,
        max_attempts: int | None = None,
    ) -> CallResult:
        def _operation(timeout: float) -> str:
            response = self._client.request(method, path, json=payload, timeout=timeout)
            # 5xx is treated as a transport failure; other statuses carry a
            # body that the caller validates.
            if response.status_code >= 500:
                response.raise_for_status()
            return response.text

        return call_with_retry(
            _operation,
            max_attempts=max_attempts or self._max_attempts,
            timeout=self._timeout,
            api_name=api_name,
            sleep=self._sleep,
        )

    def _member_call(
        self, api_name: str, network_id: str, member_id: str, payload: Any
    ) -> dict[str, Any]:
        result = self._call(api_name, "POST", f"/network/{network_id}/member/{member_id}", payload)
        if not result.ok:
            raise TransientNetworkError(
                f"{api_name} failed after {result.attempt_count} attempts: {result.error}"
            )
        logger.info("Central API response", api_name=api_name, response=result.response)
        body = result.json_body()
        if body is None:
            raise RemoteRejectionError(api_name, result.response or "")
        return body

    def get_member(self, network_id: str, member_id: str) -> dict[str, Any] | None:
        """Return the current member object, or ``None`` if it cannot be read.

        A single attempt is made: this is a pre-check, and a failure only
        means the mutating call runs anyway.
        """
        result = self._call(
            "get_member", "GET", f"/network/{network_id}/member/{member_id}", max_attempts=1
        )
        return result.json_body() if result.ok else None

    def authorize_member(self, network_id: str, member_id: str) -> dict[str, Any]:
        """Authorize *member_id* on *network_id*.

        Returns:
            The member object returned by Central.

        Raises:
            TransientNetworkError: If every attempt failed at the transport level.
            RemoteRejectionError: If the returned member is not authorized.
        """
        member = self._member_call(
            "authorize_member", network_id, member_id, {"config": {"authorized": True}}
        )
        config = member.get("config")
        if not isinstance(config, dict) or config.get("authorized") is not True:
            raise RemoteRejectionError("authorize_member", str(member))
        return member

    def rename_member(self, network_id: str, member_id: str, name: str) -> dict[str, Any]:
        """Set the display name of *member_id* to *name*.

        Raises:
            TransientNetworkError: If every attempt failed at the transport level.
            RemoteRejectionError: If the returned member carries another name.
        """
        member = self._member_call("rename_member", network_id, member_id, {"name": name})
        if member.get("name") != name:
            raise RemoteRejectionError("rename_member", str(member))
        return member

    def get_network_name(self, network_id: str) -> str | None:
        """Return the display name of *network_id*, or ``None`` if unavailable."""
        result = self._call("get_network", "GET", f"/network/{network_id}")
        body = result.json_body() if result.ok else None
        name = None
        if body is not None:
            config = body.get("config")
            # Central nests the name under config; older payloads have it top-level
            name = (config.get("name") if isinstance(config, dict) else None) or body.get("name")
        if not isinstance(name, str) or not name:
            logger.warning("Failed to retrieve network name", network_id=network_id)
            return None
        logger.info("Retrieved network name", network_name=name)
        return name
