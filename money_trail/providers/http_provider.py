"""HTTP Network Provider - Fetch the network from a REST endpoint."""

import asyncio

import httpx
import structlog

from money_trail.graph.model import Graph

logger = structlog.get_logger()


class HttpNetworkProvider:
    """Async client for an endpoint returning ``{"nodes": [...], "links": [...]}``.

    Retries rate-limited (429) and server-error (5xx) responses with
    exponential backoff. Any failure left after retries is logged and turned
    into an empty graph.
    """

    def __init__(
        self,
        base_url: str,
        endpoint: str = "/network",
        api_key: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HttpNetworkProvider":
        self._client = self._make_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _make_client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get(self, client: httpx.AsyncClient) -> dict | None:
        """GET the endpoint with retries. Returns None when every attempt failed."""
        for attempt in range(self.max_retries):
            try:
                response = await client.get(self.endpoint)
                response.raise_for_status()
                payload = response.json()
                return payload if isinstance(payload, dict) else None
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 429 or status >= 500:
                    wait_time = (2 ** attempt) * self.retry_delay
                    logger.warning(
                        "network_fetch_retry",
                        endpoint=self.endpoint,
                        status_code=status,
                        attempt=attempt + 1,
                        wait_time=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.warning("network_fetch_failed", endpoint=self.endpoint, status_code=status)
                return None
            except httpx.HTTPError as e:
                logger.warning(
                    "network_fetch_error",
                    endpoint=self.endpoint,
                    attempt=attempt + 1,
                    error=str(e),
                )
                await asyncio.sleep((2 ** attempt) * self.retry_delay)
            except ValueError as e:
                logger.warning("network_fetch_invalid_json", endpoint=self.endpoint, error=str(e))
                return None

        logger.warning("network_fetch_gave_up", endpoint=self.endpoint, attempts=self.max_retries)
        return None

    async def fetch(self) -> Graph:
        if self._client is not None:
            payload = await self._get(self._client)
        else:
            async with self._make_client() as client:
                payload = await self._get(client)

        if payload is None:
            return Graph.empty()

        graph = Graph.from_dict(payload)
        logger.info("fetched_network", nodes=len(graph.nodes), links=len(graph.links))
        return graph
