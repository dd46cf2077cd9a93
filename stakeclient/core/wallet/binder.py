"""
Identity-scoped game state binding.

The session manager hands per-identity state over in two phases: the
outgoing identity is migrated out (flushed to the discovery registry)
before the incoming identity is bound in.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from .models import normalize_balance

logger = logging.getLogger(__name__)


class GameStateBinder(Protocol):
    """Consumed by the session manager; implemented by the game layer."""

    async def migrate_out(self, identity: str) -> None:
        """Flush and publish the state of `identity` for cross-identity discovery."""
        ...

    async def bind_in(self, identity: str, fallback_seed_balance: str) -> None:
        """Load the state of `identity`, or initialize it with the seed balance."""
        ...


class NullGameStateBinder:
    async def migrate_out(self, identity: str) -> None:
        return None

    async def bind_in(self, identity: str, fallback_seed_balance: str) -> None:
        return None


@dataclass
class PlayerState:
    identity: str
    balance: str
    total_staked: str = "0"
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))


@dataclass
class DiscoveredPlayer:
    identity: str
    name: str
    chain_id: str
    total_staked: str
    registered_at: int


class InMemoryGameStateBinder:
    """Per-identity state kept in process, plus a shared discovery registry."""

    def __init__(self) -> None:
        self.current_identity: Optional[str] = None
        self._states: Dict[str, PlayerState] = {}
        self._registry: Dict[str, DiscoveredPlayer] = {}

    @property
    def current(self) -> Optional[PlayerState]:
        if self.current_identity is None:
            return None
        return self._states.get(self.current_identity)

    async def migrate_out(self, identity: str) -> None:
        state = self._states.get(identity)
        if state is not None:
            self._registry[identity] = DiscoveredPlayer(
                identity=identity,
                name=f"Wallet {identity[:8]}...",
                chain_id=f"chain-{identity}",
                total_staked=state.total_staked,
                registered_at=int(time.time() * 1000),
            )
        if self.current_identity == identity:
            self.current_identity = None
        logger.debug(f"Migrated out {identity[:16]}")

    async def bind_in(self, identity: str, fallback_seed_balance: str) -> None:
        if identity not in self._states:
            self._states[identity] = PlayerState(
                identity=identity,
                balance=normalize_balance(fallback_seed_balance),
            )
            logger.info(f"Initialized game state for {identity[:16]}")
        self.current_identity = identity

    def discover(self, exclude: Optional[str] = None) -> List[DiscoveredPlayer]:
        """Registered players, minus `exclude` (default: the current identity)."""
        skip = exclude if exclude is not None else self.current_identity
        return [p for i, p in self._registry.items() if i != skip]
