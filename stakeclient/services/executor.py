"""
Reachability-aware request execution.

Queries go to the endpoint the prober selected, or are answered from mock
fixtures while the client is in mock mode. The query language itself is
opaque here: operations are passed through untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from ..config import settings
from .reachability import ReachabilityProber

logger = logging.getLogger(__name__)

MockResponder = Callable[[str, Dict[str, Any]], Dict[str, Any]]


def graphql_endpoint(base_url: str, chain_id: Optional[str] = None, app_id: Optional[str] = None) -> str:
    """Application endpoint on a chain, or the node's service endpoint."""
    base = base_url.rstrip("/")
    if chain_id and app_id:
        return f"{base}/chains/{chain_id}/applications/{app_id}"
    return f"{base}/graphql"


class StaticMockResponder:
    """Answers operations from a fixture table keyed by operation name."""

    def __init__(self, fixtures: Optional[Dict[str, Dict[str, Any]]] = None):
        self.fixtures = dict(fixtures or {})

    def __call__(self, operation_name: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        data = self.fixtures.get(operation_name)
        if data is None:
            logger.warning(f"[Mock] Unknown operation: {operation_name}")
            return {}
        return data


class ReachabilityAwareExecutor:
    """Routes operations to the live endpoint or the mock responder."""

    timeout_s: float = 30.0

    def __init__(
        self,
        prober: ReachabilityProber,
        mock_responder: Optional[MockResponder] = None,
        app_id: Optional[str] = None,
        force_mock: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.prober = prober
        self.mock_responder = mock_responder or StaticMockResponder()
        self.app_id = app_id if app_id is not None else settings.app_id
        self.force_mock = settings.use_mock_data if force_mock is None else force_mock
        self.chain_id: Optional[str] = None
        self._transport = transport

    @property
    def mock_mode(self) -> bool:
        return self.force_mock or self.prober.status.is_mock_mode

    def bind_chain(self, chain_id: Optional[str], app_id: Optional[str] = None) -> None:
        """Point subsequent operations at a chain (e.g. after a wallet connects)."""
        self.chain_id = chain_id
        if app_id:
            self.app_id = app_id
        logger.info(f"Request endpoint now {self.endpoint or 'mock'}")

    @property
    def endpoint(self) -> Optional[str]:
        status = self.prober.status
        if self.mock_mode or status.selected_endpoint is None:
            return None
        return graphql_endpoint(status.selected_endpoint, self.chain_id, self.app_id)

    async def execute(
        self,
        operation_name: str,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Run one operation and return the response envelope.

        Raises:
            httpx.HTTPError: Transport failures against the live endpoint
        """
        variables = variables or {}
        endpoint = self.endpoint
        if endpoint is None:
            return {"data": self.mock_responder(operation_name, variables), "mock": True}

        payload = {"operationName": operation_name, "query": query, "variables": variables}
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.post(endpoint, json=payload)
            response.raise_for_status()
            body = response.json()
        if not isinstance(body, dict):
            raise ValueError(f"Unexpected response from {endpoint}")
        body.setdefault("mock", False)
        return body
