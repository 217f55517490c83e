"""
Flow Webhook Handler

Delivers a synthetic webhook request to a flow's webhook endpoint.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class WebhookPayload:
    """The HTTP request a flow receives as its trigger input."""

    method: str = "POST"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    query_params: Dict[str, str] = field(default_factory=dict)


class FlowWebhookHandler:
    """
    Sends webhook payloads to flows over HTTP.

    Failures are logged and reported through the return value; they are
    never raised to the caller.
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize handler.

        Args:
            timeout: Request timeout in seconds
            client: Pre-built HTTP client, mostly for tests
        """
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def start(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=10.0),
                follow_redirects=False,
            )
            self._owns_client = True
        logger.info("Flow webhook handler started")

    async def stop(self) -> None:
        """Close the HTTP client if this handler created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        logger.info("Flow webhook handler stopped")

    @staticmethod
    def build_url(public_url: str, flow_id: str, async_: bool = True) -> str:
        """Webhook endpoint of a flow; synchronous runs use the /sync path."""
        url = f"{public_url.rstrip('/')}/v1/webhooks/{flow_id}"
        return url if async_ else f"{url}/sync"

    async def handle_webhook(
        self,
        *,
        async_: bool,
        flow_id: str,
        payload: WebhookPayload,
        public_url: str,
        logger: Optional[logging.Logger] = None,
    ) -> bool:
        """
        Deliver a payload to a flow.

        Args:
            async_: Run the flow without waiting for its result
            flow_id: Target flow
            payload: Synthetic request handed to the flow
            public_url: Base URL the platform is reachable at
            logger: Logger of the calling request

        Returns:
            True when the flow endpoint accepted the request
        """
        log = logger or logging.getLogger(__name__)
        if self._client is None:
            await self.start()

        url = self.build_url(public_url, flow_id, async_)
        start_time = time.time()
        try:
            response = await self._client.request(
                payload.method,
                url,
                json=payload.body,
                headers=payload.headers,
                params=payload.query_params,
            )
        except httpx.HTTPError as e:
            log.warning(
                f"Flow webhook delivery failed: {e!r}",
                extra={"flow_id": flow_id},
            )
            return False

        duration_ms = int((time.time() - start_time) * 1000)
        if not response.is_success:
            log.warning(
                f"Flow webhook rejected: HTTP {response.status_code}",
                extra={"flow_id": flow_id, "duration_ms": duration_ms},
            )
            return False

        log.info(
            f"Flow webhook delivered: status={response.status_code} duration={duration_ms}ms",
            extra={"flow_id": flow_id},
        )
        return True


__all__ = ["WebhookPayload", "FlowWebhookHandler"]
