"""
Network reachability probing.

Cycles an ordered list of candidate endpoints and publishes an immutable
ReachabilityStatus. When nothing answers the client runs in mock mode.
Probe failures never propagate; they end up in ReachabilityStatus.error.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import settings
from ..core.errors import ProbeError, ProbeNetworkError, ProbeTimeout
from ..core.events import Subscription

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"
QUERY_PATH = "/graphql"
INTROSPECTION_PAYLOAD = {"query": "{ __typename }"}
MOCK_MODE_MESSAGE = "No Linera network available. Running in mock mode."


class NetworkKind(str, Enum):
    DEVNET = "devnet"
    TESTNET = "testnet"
    MAINNET = "mainnet"
    LOCAL = "local"
    MOCK = "mock"
    UNKNOWN = "unknown"


def detect_network_kind(endpoint: str) -> NetworkKind:
    """Classify an endpoint URL."""
    lowered = endpoint.lower()
    if "devnet" in lowered:
        return NetworkKind.DEVNET
    if "testnet" in lowered:
        return NetworkKind.TESTNET
    if "mainnet" in lowered:
        return NetworkKind.MAINNET
    if "localhost" in lowered or "127.0.0.1" in lowered:
        return NetworkKind.LOCAL
    return NetworkKind.UNKNOWN


class ReachabilityStatus(BaseModel):
    """Point-in-time network assessment. A new snapshot per probe cycle."""

    model_config = ConfigDict(frozen=True)

    connected: bool = Field(description="Whether a live endpoint was found")
    selected_endpoint: Optional[str] = Field(default=None, description="Endpoint that answered")
    network_kind: NetworkKind = Field(default=NetworkKind.MOCK, description="Network classification")
    latency_ms: Optional[float] = Field(default=None, description="Round trip of the successful probe")
    last_checked_at: Optional[datetime] = Field(default=None, description="When the cycle finished")
    error: Optional[str] = Field(default=None, description="Why no endpoint is connected")

    @model_validator(mode="after")
    def _offline_means_mock(self) -> "ReachabilityStatus":
        if not self.connected and (
            self.network_kind != NetworkKind.MOCK or self.selected_endpoint is not None
        ):
            raise ValueError("A disconnected status must be mock mode with no endpoint")
        return self

    @classmethod
    def initial(cls) -> "ReachabilityStatus":
        return cls(connected=False)

    @classmethod
    def offline(cls, error: str) -> "ReachabilityStatus":
        return cls(
            connected=False,
            last_checked_at=datetime.now(timezone.utc),
            error=error,
        )

    @property
    def is_mock_mode(self) -> bool:
        return not self.connected or self.network_kind == NetworkKind.MOCK

    @property
    def network_name(self) -> str:
        return self.network_kind.value.capitalize()

    def to_dict(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json")
        payload["is_mock_mode"] = self.is_mock_mode
        payload["network_name"] = self.network_name
        return payload


@dataclass(frozen=True)
class ProbeCandidate:
    name: str
    url: str
    kind: NetworkKind


def _kind_for(name: str, url: str) -> NetworkKind:
    try:
        kind = NetworkKind(name)
    except ValueError:
        return detect_network_kind(url)
    return kind if kind != NetworkKind.MOCK else detect_network_kind(url)


StatusListener = Callable[[ReachabilityStatus], None]


class ReachabilityProber:
    """Finds the first reachable endpoint among the configured candidates."""

    def __init__(
        self,
        endpoints: Optional[Mapping[str, str]] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        configured = endpoints if endpoints is not None else settings.probe_candidates()
        self._candidates: List[ProbeCandidate] = [
            ProbeCandidate(name=name, url=url.rstrip("/"), kind=_kind_for(name, url))
            for name, url in configured.items()
        ]
        self.timeout_s = timeout_s if timeout_s is not None else settings.probe_timeout_seconds
        self._transport = transport
        self._status = ReachabilityStatus.initial()
        self._lock = asyncio.Lock()
        self._listeners: List[StatusListener] = []

    @property
    def status(self) -> ReachabilityStatus:
        return self._status

    def subscribe(self, listener: StatusListener) -> Subscription:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(remove)

    def candidates(self, override: Optional[str] = None) -> List[ProbeCandidate]:
        """Candidates in probe order, the override (if any) first."""
        ordered = list(self._candidates)
        if override:
            url = override.rstrip("/")
            ordered.insert(0, ProbeCandidate(name="custom", url=url, kind=detect_network_kind(url)))
        return ordered

    async def check(self, override: Optional[str] = None) -> ReachabilityStatus:
        """Run one probe cycle and publish the resulting status. Never raises."""
        async with self._lock:
            try:
                status = await self._run_cycle(override)
            except Exception as e:
                logger.exception("Reachability cycle failed unexpectedly")
                status = ReachabilityStatus.offline(f"{MOCK_MODE_MESSAGE} ({e})")
            self._publish(status)
            return status

    async def _run_cycle(self, override: Optional[str]) -> ReachabilityStatus:
        last_error: Optional[ProbeError] = None
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_s),
            transport=self._transport,
            headers={"cache-control": "no-cache"},
        ) as client:
            for candidate in self.candidates(override):
                try:
                    latency_ms = await self._check_candidate(client, candidate)
                except ProbeError as e:
                    logger.debug(f"{candidate.name} unreachable: {e.message}")
                    last_error = e
                    continue
                logger.info(f"Reachable {candidate.name} at {candidate.url} ({latency_ms:.0f} ms)")
                return ReachabilityStatus(
                    connected=True,
                    selected_endpoint=candidate.url,
                    network_kind=candidate.kind,
                    latency_ms=latency_ms,
                    last_checked_at=datetime.now(timezone.utc),
                )

        error = MOCK_MODE_MESSAGE
        if last_error is not None:
            error = f"{MOCK_MODE_MESSAGE} Last error: {last_error.endpoint}: {last_error.message}"
        logger.warning("No endpoint reachable, falling back to mock mode")
        return ReachabilityStatus.offline(error)

    async def _check_candidate(self, client: httpx.AsyncClient, candidate: ProbeCandidate) -> float:
        """Health GET, then the query POST fallback. Returns latency in ms."""
        try:
            return await self._timed(client.get(f"{candidate.url}{HEALTH_PATH}"), candidate.url)
        except ProbeError as e:
            logger.debug(f"{candidate.name} health check failed ({e.message}), trying query path")
        return await self._timed(
            client.post(f"{candidate.url}{QUERY_PATH}", json=INTROSPECTION_PAYLOAD),
            candidate.url,
        )

    async def _timed(self, request: Any, endpoint: str) -> float:
        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(request, timeout=self.timeout_s)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ProbeTimeout(endpoint, f"timed out after {self.timeout_s}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProbeNetworkError(endpoint, str(e) or e.__class__.__name__) from e
        if not response.is_success:
            raise ProbeNetworkError(endpoint, f"HTTP {response.status_code}")
        return (time.perf_counter() - start) * 1000

    def _publish(self, status: ReachabilityStatus) -> None:
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Reachability listener failed")
