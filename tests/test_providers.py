"""Tests for network data providers.

The HTTP provider is exercised against ``httpx.MockTransport``; no network
access is needed.
"""

import asyncio
import json

import httpx
import pytest

from money_trail.graph import Graph
from money_trail.providers import (
    HttpNetworkProvider,
    JsonFileProvider,
    NetworkDataProvider,
    StaticNetworkProvider,
    create_provider,
)

PAYLOAD = {
    "nodes": [
        {"id": "a", "name": "A", "type": "donor"},
        {"id": "b", "name": "B", "type": "media"},
    ],
    "links": [{"source": "a", "target": "b", "relationship": "advertiser", "amount": 5000}],
}


class TestJsonFileProvider:
    """Tests for the JSON file provider."""

    def test_missing_file_gives_empty_graph(self, tmp_path):
        """Test a missing file is treated as no data."""
        graph = JsonFileProvider(tmp_path / "missing.json").load()
        assert graph.is_empty

    def test_invalid_json_gives_empty_graph(self, tmp_path):
        """Test a corrupt file is treated as no data."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert JsonFileProvider(path).load().is_empty

    def test_non_object_payload(self, tmp_path):
        """Test a top-level array is rejected."""
        path = tmp_path / "list.json"
        path.write_text("[]")
        assert JsonFileProvider(path).load().is_empty

    def test_loads_fixture(self, sample_network_path):
        """Test loading the sample network."""
        graph = asyncio.run(JsonFileProvider(sample_network_path).fetch())

        assert [n.id for n in graph.nodes] == ["mercer", "donors-trust", "breitbart"]
        assert len(graph.links) == 2


class TestStaticNetworkProvider:
    """Tests for the in-memory provider."""

    def test_serves_graph(self, chain_graph):
        """Test the given graph is returned unchanged."""
        assert asyncio.run(StaticNetworkProvider(chain_graph).fetch()) is chain_graph

    def test_satisfies_protocol(self):
        """Test providers satisfy the provider protocol."""
        assert isinstance(StaticNetworkProvider(), NetworkDataProvider)
        assert isinstance(JsonFileProvider("x.json"), NetworkDataProvider)


class TestHttpNetworkProvider:
    """Tests for the HTTP provider."""

    def test_fetch_success(self):
        """Test a successful response is parsed and auth is sent."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=PAYLOAD)

        provider = HttpNetworkProvider(
            "https://api.example.org/",
            api_key="secret",
            transport=httpx.MockTransport(handler),
        )
        graph = asyncio.run(provider.fetch())

        assert seen == {"path": "/network", "auth": "Bearer secret"}
        assert [n.id for n in graph.nodes] == ["a", "b"]
        assert graph.links[0].amount == 5000

    def test_server_errors_retried_then_empty(self):
        """Test 5xx responses are retried and finally give an empty graph."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        provider = HttpNetworkProvider(
            "https://api.example.org",
            max_retries=3,
            retry_delay=0,
            transport=httpx.MockTransport(handler),
        )
        graph = asyncio.run(provider.fetch())

        assert graph.is_empty
        assert len(calls) == 3

    def test_recovers_after_rate_limit(self):
        """Test a 429 followed by success returns the graph."""
        responses = [httpx.Response(429), httpx.Response(200, json=PAYLOAD)]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        async def run():
            async with HttpNetworkProvider(
                "https://api.example.org",
                retry_delay=0,
                transport=httpx.MockTransport(handler),
            ) as provider:
                return await provider.fetch()

        graph = asyncio.run(run())
        assert len(graph.nodes) == 2

    def test_client_error_not_retried(self):
        """Test a 404 gives up immediately."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(404)

        provider = HttpNetworkProvider(
            "https://api.example.org",
            retry_delay=0,
            transport=httpx.MockTransport(handler),
        )

        assert asyncio.run(provider.fetch()).is_empty
        assert len(calls) == 1

    def test_invalid_json_gives_empty_graph(self):
        """Test a non-JSON body is treated as no data."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        provider = HttpNetworkProvider(
            "https://api.example.org",
            retry_delay=0,
            transport=httpx.MockTransport(handler),
        )
        assert asyncio.run(provider.fetch()) == Graph.empty()


class TestCreateProvider:
    """Tests for the provider factory."""

    def test_json_provider(self, tmp_path):
        """Test the json provider uses the given path."""
        provider = create_provider("json", str(tmp_path / "net.json"))
        assert isinstance(provider, JsonFileProvider)
        assert provider.path == tmp_path / "net.json"

    def test_http_provider(self):
        """Test the http provider uses the given base URL."""
        provider = create_provider("HTTP", "https://api.example.org")
        assert isinstance(provider, HttpNetworkProvider)
        assert provider.base_url == "https://api.example.org"

    def test_http_requires_url(self, monkeypatch):
        """Test the http provider needs a base URL."""
        monkeypatch.setattr("money_trail.config.NETWORK_API_URL", "")
        with pytest.raises(ValueError):
            create_provider("http")

    def test_unknown_provider(self):
        """Test an unknown provider type raises ValueError."""
        with pytest.raises(ValueError):
            create_provider("postgres")
