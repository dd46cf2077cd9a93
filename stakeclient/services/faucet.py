"""Testnet faucet client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


@dataclass
class FaucetResult:
    success: bool
    message: str
    amount: Optional[str] = None
    chain_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "amount": self.amount,
            "chainId": self.chain_id,
            "error": self.error,
        }


class FaucetClient:
    """Requests test tokens for a chain from the configured faucet."""

    timeout_s: float = 10.0

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.faucet_url).rstrip("/")
        self._transport = transport

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout or self.timeout_s, transport=self._transport)

    async def request_tokens(self, chain_id: str) -> FaucetResult:
        """Claim tokens via the REST endpoint. Never raises."""
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/api/claim",
                    json={"chain_id": chain_id},
                )
                if response.status_code >= 400:
                    return FaucetResult(
                        success=False,
                        message="Faucet request failed",
                        error=response.text or f"HTTP {response.status_code}",
                    )
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Faucet request error: {e}")
            return FaucetResult(success=False, message="Failed to connect to faucet", error=str(e))

        amount = data.get("amount") if isinstance(data, dict) else None
        return FaucetResult(
            success=True,
            message="Tokens received successfully!",
            amount=str(amount) if amount is not None else "1000",
            chain_id=(data.get("chain_id") if isinstance(data, dict) else None) or chain_id,
        )

    async def request_tokens_via_rpc(self, chain_id: str) -> FaucetResult:
        """Claim tokens via the JSON-RPC faucet surface. Never raises."""
        payload = {
            "jsonrpc": "2.0",
            "method": "request_tokens",
            "params": {"chain_id": chain_id},
            "id": 1,
        }
        try:
            async with self._client() as client:
                response = await client.post(self.base_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Faucet RPC error: {e}")
            return FaucetResult(success=False, message="Failed to request tokens", error=str(e))

        if data.get("error"):
            error = data["error"]
            return FaucetResult(
                success=False,
                message="Faucet request failed",
                error=error.get("message", str(error)) if isinstance(error, dict) else str(error),
            )
        amount = (data.get("result") or {}).get("amount")
        return FaucetResult(
            success=True,
            message="Tokens received successfully!",
            amount=str(amount) if amount is not None else "1000",
            chain_id=chain_id,
        )

    async def claim(self, chain_id: str) -> FaucetResult:
        """REST claim with JSON-RPC fallback."""
        result = await self.request_tokens(chain_id)
        if result.success:
            return result
        logger.info(f"REST faucet failed ({result.error}), trying JSON-RPC")
        return await self.request_tokens_via_rpc(chain_id)

    async def is_available(self) -> bool:
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get(self.base_url)
                return response.is_success
        except httpx.HTTPError:
            return False
