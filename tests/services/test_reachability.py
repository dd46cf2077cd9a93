"""
Tests for network reachability probing

Candidate ordering, health/query fallback, timeouts and the mock-mode
status invariant.
"""

import asyncio
import json

import httpx
import pytest
from pydantic import ValidationError

from stakeclient.services.reachability import (
    MOCK_MODE_MESSAGE,
    NetworkKind,
    ReachabilityProber,
    ReachabilityStatus,
    detect_network_kind,
)

ENDPOINTS = {
    "devnet": "https://devnet.example",
    "testnet": "https://testnet.example",
    "local": "http://localhost:8080",
}


def make_prober(handler, endpoints=ENDPOINTS, timeout_s=1.0):
    return ReachabilityProber(
        endpoints=endpoints,
        timeout_s=timeout_s,
        transport=httpx.MockTransport(handler),
    )


# =============================================================================
# Status model
# =============================================================================

class TestReachabilityStatus:
    """Tests for the status snapshot invariant."""

    def test_initial_is_mock(self):
        status = ReachabilityStatus.initial()

        assert not status.connected
        assert status.is_mock_mode
        assert status.network_kind == NetworkKind.MOCK
        assert status.selected_endpoint is None

    def test_disconnected_with_endpoint_is_invalid(self):
        with pytest.raises(ValidationError):
            ReachabilityStatus(connected=False, selected_endpoint="https://devnet.example")

    def test_disconnected_with_network_is_invalid(self):
        with pytest.raises(ValidationError):
            ReachabilityStatus(connected=False, network_kind=NetworkKind.TESTNET)

    def test_status_is_immutable(self):
        status = ReachabilityStatus.initial()

        with pytest.raises(ValidationError):
            status.connected = True

    def test_to_dict_includes_derived_fields(self):
        status = ReachabilityStatus(
            connected=True,
            selected_endpoint="https://testnet.example",
            network_kind=NetworkKind.TESTNET,
            latency_ms=12.5,
        )

        payload = status.to_dict()

        assert payload["network_name"] == "Testnet"
        assert payload["is_mock_mode"] is False
        assert payload["network_kind"] == "testnet"


@pytest.mark.parametrize(
    "url,kind",
    [
        ("https://rpc.devnet.linera.dev", NetworkKind.DEVNET),
        ("https://faucet.testnet-conway.linera.net", NetworkKind.TESTNET),
        ("https://mainnet.example", NetworkKind.MAINNET),
        ("http://127.0.0.1:8080", NetworkKind.LOCAL),
        ("https://example.com", NetworkKind.UNKNOWN),
    ],
)
def test_detect_network_kind(url, kind):
    assert detect_network_kind(url) == kind


# =============================================================================
# Probe cycle
# =============================================================================

class TestProbeCycle:
    """Tests for ReachabilityProber.check()."""

    @pytest.mark.asyncio
    async def test_first_candidate_wins(self):
        prober = make_prober(lambda request: httpx.Response(200, text="ok"))

        status = await prober.check()

        assert status.connected
        assert status.selected_endpoint == "https://devnet.example"
        assert status.network_kind == NetworkKind.DEVNET
        assert status.latency_ms is not None
        assert prober.status == status

    @pytest.mark.asyncio
    async def test_timeout_moves_to_next_candidate(self):
        seen = []

        def handler(request):
            seen.append((request.method, str(request.url)))
            if request.url.host == "devnet.example":
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200)

        status = await make_prober(handler).check()

        assert status.connected
        assert status.selected_endpoint == "https://testnet.example"
        assert status.network_kind == NetworkKind.TESTNET
        assert seen == [
            ("GET", "https://devnet.example/health"),
            ("POST", "https://devnet.example/graphql"),
            ("GET", "https://testnet.example/health"),
        ]

    @pytest.mark.asyncio
    async def test_slow_endpoint_hits_probe_timeout(self):
        async def handler(request):
            if request.url.host == "devnet.example":
                await asyncio.sleep(1)
            return httpx.Response(200)

        status = await make_prober(handler, timeout_s=0.05).check()

        assert status.selected_endpoint == "https://testnet.example"

    @pytest.mark.asyncio
    async def test_health_failure_falls_back_to_query(self):
        bodies = []

        def handler(request):
            if request.url.path == "/health":
                return httpx.Response(404)
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"__typename": "QueryRoot"}})

        status = await make_prober(handler).check()

        assert status.selected_endpoint == "https://devnet.example"
        assert bodies == [{"query": "{ __typename }"}]

    @pytest.mark.asyncio
    async def test_all_candidates_down_means_mock_mode(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        status = await make_prober(handler).check()

        assert not status.connected
        assert status.is_mock_mode
        assert status.selected_endpoint is None
        assert status.error.startswith(MOCK_MODE_MESSAGE)
        assert "http://localhost:8080" in status.error
        assert status.last_checked_at is not None

    @pytest.mark.asyncio
    async def test_no_candidates_means_mock_mode(self):
        status = await make_prober(lambda request: httpx.Response(200), endpoints={}).check()

        assert not status.connected
        assert status.error == MOCK_MODE_MESSAGE

    @pytest.mark.asyncio
    async def test_custom_endpoint_is_tried_first(self):
        seen = []

        def handler(request):
            seen.append(request.url.host)
            return httpx.Response(200)

        status = await make_prober(handler).check("http://127.0.0.1:9000/")

        assert status.selected_endpoint == "http://127.0.0.1:9000"
        assert status.network_kind == NetworkKind.LOCAL
        assert seen == ["127.0.0.1"]

    def test_candidate_order(self):
        prober = make_prober(lambda request: httpx.Response(200))

        names = [c.name for c in prober.candidates("https://custom.example")]

        assert names == ["custom", "devnet", "testnet", "local"]

    @pytest.mark.asyncio
    async def test_listeners_receive_each_status(self):
        prober = make_prober(lambda request: httpx.Response(200))
        received = []
        subscription = prober.subscribe(received.append)

        await prober.check()
        subscription.cancel()
        await prober.check()

        assert len(received) == 1
        assert received[0].connected

    @pytest.mark.asyncio
    async def test_check_never_raises(self):
        prober = make_prober(lambda request: httpx.Response(200))

        def explode(status):
            raise RuntimeError("listener bug")

        prober.subscribe(explode)

        status = await prober.check()

        assert status.connected


@pytest.mark.asyncio
async def test_network_node_candidate_is_classified_from_url():
    def handler(request):
        if request.url.host == "rpc.testnet-conway.linera.net":
            return httpx.Response(200)
        raise httpx.ConnectError("refused", request=request)

    prober = make_prober(
        handler,
        endpoints={"local": "http://localhost:8080", "testnet-node": "https://rpc.testnet-conway.linera.net"},
    )

    status = await prober.check()

    assert status.selected_endpoint == "https://rpc.testnet-conway.linera.net"
    assert status.network_kind == NetworkKind.TESTNET
