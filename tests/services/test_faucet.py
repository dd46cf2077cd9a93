import json

import httpx
import pytest

from stakeclient.services.faucet import FaucetClient, FaucetResult

CHAIN = "a" * 64


def make_client(handler):
    return FaucetClient("https://faucet.example/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_rest_claim():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"amount": 250, "chain_id": CHAIN})

    result = await make_client(handler).request_tokens(CHAIN)

    assert result.success
    assert result.amount == "250"
    assert result.chain_id == CHAIN
    assert str(requests[0].url) == "https://faucet.example/api/claim"
    assert json.loads(requests[0].content) == {"chain_id": CHAIN}


@pytest.mark.asyncio
async def test_rest_error_status():
    result = await make_client(lambda request: httpx.Response(429, text="slow down")).request_tokens(CHAIN)

    assert not result.success
    assert result.error == "slow down"


@pytest.mark.asyncio
async def test_claim_falls_back_to_rpc():
    def handler(request):
        if request.url.path == "/api/claim":
            return httpx.Response(500)
        body = json.loads(request.content)
        assert body["method"] == "request_tokens"
        return httpx.Response(200, json={"jsonrpc": "2.0", "result": {"amount": "100"}, "id": 1})

    result = await make_client(handler).claim(CHAIN)

    assert result.success
    assert result.amount == "100"


@pytest.mark.asyncio
async def test_rpc_error_payload():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "error": {"message": "rate limited"}, "id": 1})

    result = await make_client(handler).request_tokens_via_rpc(CHAIN)

    assert not result.success
    assert result.error == "rate limited"


@pytest.mark.asyncio
async def test_network_failure_never_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result = await make_client(handler).claim(CHAIN)

    assert not result.success
    assert "refused" in result.error


@pytest.mark.asyncio
async def test_is_available():
    assert await make_client(lambda request: httpx.Response(200)).is_available()
    assert not await make_client(lambda request: httpx.Response(503)).is_available()


def test_result_to_dict():
    result = FaucetResult(success=True, message="ok", amount="1", chain_id=CHAIN)

    assert result.to_dict() == {
        "success": True,
        "message": "ok",
        "amount": "1",
        "chainId": CHAIN,
        "error": None,
    }
