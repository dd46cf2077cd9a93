"""Native Linera extension wallet backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from ..core.errors import BackendUnavailable, NotConnected
from ..core.wallet.models import BackendKind, Session
from .base import AccountsListener, HostEnvironment, Subscription, classify_backend_error

logger = logging.getLogger(__name__)

EXTENSION_BINDING = "lineraWallet"


class ExtensionWallet(Protocol):
    """RPC surface exposed by the installed extension."""

    async def connect(self) -> Dict[str, Any]:
        ...

    async def disconnect(self) -> None:
        ...

    async def sign(self, message: str) -> str:
        ...

    async def get_owner(self) -> Optional[str]:
        ...

    async def get_chains(self) -> List[str]:
        ...


class NativeExtensionBackend:
    """Delegates every operation to the extension found in the host bindings."""

    kind = BackendKind.NATIVE_EXTENSION

    def __init__(self, environment: HostEnvironment, binding: str = EXTENSION_BINDING):
        self.environment = environment
        self.binding = binding
        self._session: Optional[Session] = None

    def _wallet(self) -> Optional[ExtensionWallet]:
        return self.environment.get(self.binding)

    def is_available(self) -> bool:
        return self.environment.has(self.binding)

    async def probe_existing(self) -> Optional[Session]:
        wallet = self._wallet()
        if wallet is None:
            return None
        try:
            owner = await wallet.get_owner()
            if not owner:
                return None
            chains = await wallet.get_chains()
        except Exception as e:
            # Not authorized yet; restoring must never prompt.
            logger.debug(f"Extension wallet has no existing connection: {e}")
            return None
        self._session = self._build_session(owner, chains)
        return self._session

    async def connect(self) -> Session:
        wallet = self._wallet()
        if wallet is None:
            raise BackendUnavailable(
                "Linera wallet not found",
                backend=self.kind.value,
            )
        try:
            connection = await wallet.connect()
        except Exception as e:
            raise classify_backend_error(e, self.kind, "connect") from e

        owner = connection.get("owner")
        if not owner:
            raise classify_backend_error(
                ValueError("extension returned no owner"), self.kind, "connect"
            )
        self._session = self._build_session(owner, connection.get("chains") or [])
        return self._session

    async def disconnect(self) -> None:
        wallet = self._wallet()
        self._session = None
        if wallet is None:
            return
        try:
            await wallet.disconnect()
        except Exception as e:
            logger.warning(f"Extension disconnect failed: {e}")

    async def sign(self, message: str) -> str:
        wallet = self._wallet()
        if self._session is None or wallet is None:
            raise NotConnected("Linera wallet not connected", backend=self.kind.value)
        try:
            return await wallet.sign(message)
        except Exception as e:
            raise classify_backend_error(e, self.kind, "sign") from e

    def subscribe_account_changes(self, listener: AccountsListener) -> Subscription:
        return Subscription()

    def _build_session(self, owner: str, chains: List[str]) -> Session:
        return Session(
            backend_kind=self.kind,
            identity=owner,
            account_handles=tuple(str(chain) for chain in chains),
            balance="0",
        )
