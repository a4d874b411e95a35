"""Network data providers -- factory selects the backend from config."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from money_trail.graph.model import Graph

from .http_provider import HttpNetworkProvider
from .json_provider import JsonFileProvider, StaticNetworkProvider


# ---------------------------------------------------------------------------
# Protocol that all providers satisfy
# ---------------------------------------------------------------------------
@runtime_checkable
class NetworkDataProvider(Protocol):
    """Anything that can produce the current node/link snapshot."""

    async def fetch(self) -> Graph: ...


# ---------------------------------------------------------------------------
# Factory -- reads from config (env vars) unless caller overrides
# ---------------------------------------------------------------------------
def create_provider(
    provider_type: str | None = None,
    source: str | None = None,
) -> JsonFileProvider | HttpNetworkProvider:
    """Create a network provider based on configuration.

    ``source`` is a file path for "json" and a base URL for "http"; when
    omitted it falls back to NETWORK_JSON_PATH / NETWORK_API_URL.
    """
    from money_trail.config import (
        NETWORK_API_ENDPOINT,
        NETWORK_API_KEY,
        NETWORK_API_MAX_RETRIES,
        NETWORK_API_TIMEOUT,
        NETWORK_API_URL,
        NETWORK_JSON_PATH,
        NETWORK_PROVIDER,
    )

    ptype = (provider_type or NETWORK_PROVIDER).lower()

    if ptype == "json":
        return JsonFileProvider(source or NETWORK_JSON_PATH)
    elif ptype == "http":
        base_url = source or NETWORK_API_URL
        if not base_url:
            raise ValueError("NETWORK_API_URL must be set for the http provider")
        return HttpNetworkProvider(
            base_url=base_url,
            endpoint=NETWORK_API_ENDPOINT,
            api_key=NETWORK_API_KEY or None,
            timeout=NETWORK_API_TIMEOUT,
            max_retries=NETWORK_API_MAX_RETRIES,
        )
    else:
        raise ValueError(
            f"Unknown NETWORK_PROVIDER={ptype!r}. Expected 'json' or 'http'."
        )


__all__ = [
    "HttpNetworkProvider",
    "JsonFileProvider",
    "NetworkDataProvider",
    "StaticNetworkProvider",
    "create_provider",
]
