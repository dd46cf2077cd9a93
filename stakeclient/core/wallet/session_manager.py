"""
Wallet session manager.

Single authority over the active Session:
- Restores a prior session on startup (local wallet first, then extension)
- Connects, switches and disconnects backends one operation at a time
- Hands per-identity game state over (migrate-out before bind-in)
- Notifies subscribers with exactly one IdentityBinding per change
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Callable, Dict, List, Mapping, Optional, Set, Union, cast

from ...config import settings
from ...providers.base import CredentialBackend, HostEnvironment, Subscription, classify_backend_error
from ...providers.bridged import BridgedProviderBackend
from ...providers.local_simulated import LocalSimulatedBackend
from ...providers.native_extension import NativeExtensionBackend
from ...services.faucet import FaucetClient, FaucetResult
from ...storage import FileKeyValueStorage, KeyValueStorage
from ..errors import InvalidBackend, NotConnected, OperationInProgress, WalletError
from .binder import GameStateBinder, InMemoryGameStateBinder, NullGameStateBinder
from .models import BackendKind, IdentityBinding, Session
from .session_store import LocalCredentialStore, SessionStore


logger = logging.getLogger(__name__)

BindingListener = Callable[[IdentityBinding], None]

# Locally persisted sessions are confirmed first; bridged is never restored.
RESTORE_ORDER = (BackendKind.LOCAL_SIMULATED, BackendKind.NATIVE_EXTENSION)


class WalletSessionManager:
    """
    Orchestrates credential backends behind one connect/disconnect/sign contract.

    connect() and disconnect() are mutually exclusive: a call made while
    another is pending fails with OperationInProgress instead of waiting.
    """

    def __init__(
        self,
        backends: Mapping[BackendKind, CredentialBackend],
        binder: Optional[GameStateBinder] = None,
        store: Optional[SessionStore] = None,
        faucet: Optional[FaucetClient] = None,
        fallback_seed_balance: str = "10000",
        faucet_simulated_amount: str = "10000",
        environment: Optional[HostEnvironment] = None,
    ):
        self._backends: Dict[BackendKind, CredentialBackend] = dict(backends)
        self._binder = binder or NullGameStateBinder()
        self._store = store or SessionStore()
        self._faucet = faucet
        self.environment = environment or HostEnvironment()
        self.fallback_seed_balance = fallback_seed_balance
        self.faucet_simulated_amount = faucet_simulated_amount
        self._lock = asyncio.Lock()
        self._listeners: List[BindingListener] = []
        self._account_subscription: Optional[Subscription] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def session(self) -> Session:
        return self._store.current

    @property
    def binder(self) -> GameStateBinder:
        return self._binder

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def backend(self, kind: Union[BackendKind, str]) -> CredentialBackend:
        resolved = self._resolve_kind(kind)
        return self._backends[resolved]

    def backend_availability(self) -> Dict[str, bool]:
        return {kind.value: backend.is_available() for kind, backend in self._backends.items()}

    def subscribe(self, listener: BindingListener) -> Subscription:
        """Receive IdentityBinding events until the handle is cancelled."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(remove)

    async def restore(self) -> Session:
        """Adopt an existing session without prompting the user."""
        async with self._exclusive("restore"):
            if self.session.connected:
                return self.session
            for kind in RESTORE_ORDER:
                backend = self._backends.get(kind)
                if backend is None or not backend.is_available():
                    continue
                try:
                    session = await backend.probe_existing()
                except Exception as e:
                    logger.warning(f"Restore probe failed for {kind.value}: {e}")
                    continue
                if session is None:
                    continue
                await self._activate(backend, session)
                logger.info(f"Restored {kind.value} session for {session.identity[:16]}...")
                return session
            logger.info("No existing wallet session to restore")
            return self.session

    async def connect(self, kind: Union[BackendKind, str]) -> Session:
        """Connect the given backend, replacing any active session.

        Raises:
            InvalidBackend: Unknown kind, or the backend reports itself unavailable
            OperationInProgress: Another connect/disconnect is pending
            BackendUnavailable / UserRejected / WalletError: From the backend, verbatim
        """
        resolved = self._resolve_kind(kind)
        backend = self._backends[resolved]
        if not backend.is_available():
            raise InvalidBackend(f"{resolved.value} wallet is not available", backend=resolved.value)

        async with self._exclusive("connect"):
            try:
                session = await backend.connect()
            except WalletError as e:
                logger.warning(f"Connect via {resolved.value} failed: {e.message}")
                raise
            except Exception as e:
                raise classify_backend_error(e, resolved, "connect") from e

            await self._activate(backend, session)
            logger.info(f"Connected {resolved.value} as {session.identity[:16]}...")
            return session

    async def disconnect(self) -> None:
        """Drop the active session. No-op when nothing is connected."""
        async with self._exclusive("disconnect"):
            current = self.session
            if not current.connected:
                return

            await self._binder.migrate_out(current.identity)
            await self._deactivate(current.backend_kind)
            self._store.clear()
            logger.info(f"Disconnected {current.backend_kind.value}")
            self._emit(IdentityBinding(current.identity, None))

    async def sign(self, message: str) -> str:
        current = self.session
        if not current.connected:
            raise NotConnected()
        return await self._backends[current.backend_kind].sign(message)

    async def adjust_local_balance(self, delta: Union[Decimal, int, str]) -> Session:
        """Apply a balance change to the local wallet and its durable record."""
        backend = self._local_backend_in_use()
        updated = await backend.adjust_balance(delta)
        self._replace_if_current(updated)
        return self.session

    async def request_faucet(self) -> FaucetResult:
        """Drip test tokens into the active wallet."""
        current = self.session
        if not current.connected:
            raise NotConnected()

        if current.backend_kind == BackendKind.LOCAL_SIMULATED:
            session = await self.adjust_local_balance(self.faucet_simulated_amount)
            return FaucetResult(
                success=True,
                message=f"Demo tokens added! (+{self.faucet_simulated_amount})",
                amount=self.faucet_simulated_amount,
                chain_id=session.primary_chain,
            )

        chain_id = current.primary_chain
        if chain_id is None:
            return FaucetResult(success=False, message="No chain selected")
        faucet = self._faucet or FaucetClient()
        return await faucet.claim(chain_id)

    async def clear_local_data(self) -> None:
        """Delete the local wallet record, dropping the session if it is local."""
        async with self._exclusive("clear"):
            local = self._local_backend()
            current = self.session
            if current.backend_kind == BackendKind.LOCAL_SIMULATED:
                await self._binder.migrate_out(current.identity)
                self._store.clear()
                self._emit(IdentityBinding(current.identity, None))
            await local.clear()

    def export_local_wallet(self) -> Optional[str]:
        """Pretty JSON of the local wallet record, or None if there is none."""
        return self._local_backend().store.export_json()

    async def import_local_wallet(self, payload: str) -> bool:
        """Replace the local wallet record. Refused while that wallet is active."""
        async with self._exclusive("import"):
            if self.session.backend_kind == BackendKind.LOCAL_SIMULATED:
                raise InvalidBackend(
                    "Disconnect the local wallet before importing another",
                    backend=BackendKind.LOCAL_SIMULATED.value,
                )
            return await self._local_backend().store.import_json(payload)

    async def settle(self) -> None:
        """Wait for pending account-change handling to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -- internals -------------------------------------------------------

    @asynccontextmanager
    async def _exclusive(self, operation: str) -> AsyncIterator[None]:
        if self._lock.locked():
            raise OperationInProgress(details={"operation": operation})
        async with self._lock:
            yield

    def _resolve_kind(self, kind: Union[BackendKind, str]) -> BackendKind:
        try:
            resolved = BackendKind(kind)
        except ValueError:
            raise InvalidBackend(f"Unknown wallet backend '{kind}'")
        if resolved == BackendKind.NONE or resolved not in self._backends:
            raise InvalidBackend(f"Unknown wallet backend '{resolved.value}'")
        return resolved

    def _local_backend(self) -> LocalSimulatedBackend:
        if BackendKind.LOCAL_SIMULATED not in self._backends:
            raise InvalidBackend("Local wallet is not configured")
        return cast(LocalSimulatedBackend, self._backends[BackendKind.LOCAL_SIMULATED])

    def _local_backend_in_use(self) -> LocalSimulatedBackend:
        if self.session.backend_kind != BackendKind.LOCAL_SIMULATED:
            raise NotConnected("Local wallet is not the active session")
        return self._local_backend()

    def _seed_balance(self, session: Session) -> str:
        if session.backend_kind == BackendKind.LOCAL_SIMULATED:
            return session.balance
        return self.fallback_seed_balance

    async def _activate(self, backend: CredentialBackend, session: Session) -> None:
        """Install `session` as the active one. Caller holds the lock.

        The outgoing identity is migrated out before any adapter is torn
        down. If that fails the previous session stays usable and the new
        backend is released; if binding in fails the session drops to none.
        """
        previous = self.session
        switching = previous.connected and previous.backend_kind != backend.kind
        identity_changed = previous.identity != session.identity

        if identity_changed and previous.identity is not None:
            try:
                await self._binder.migrate_out(previous.identity)
            except Exception:
                if switching:
                    await self._disconnect_quietly(backend)
                else:
                    # Same adapter already holds the new account; the old
                    # session cannot be kept.
                    await self._deactivate(backend.kind)
                    self._store.clear()
                    self._emit(IdentityBinding(previous.identity, None))
                raise

        if switching:
            await self._deactivate(previous.backend_kind)
        elif self._account_subscription is not None:
            self._account_subscription.cancel()
            self._account_subscription = None

        self._store.replace(session)
        if identity_changed and session.identity is not None:
            try:
                await self._binder.bind_in(session.identity, self._seed_balance(session))
            except Exception:
                await self._disconnect_quietly(backend)
                self._store.clear()
                if previous.identity is not None:
                    self._emit(IdentityBinding(previous.identity, None))
                raise

        kind = backend.kind
        self._account_subscription = backend.subscribe_account_changes(
            lambda changed: self._on_accounts_changed(kind, changed)
        )
        self._emit(IdentityBinding(previous.identity, session.identity))

    async def _rebind(self, previous_identity: Optional[str], session: Session) -> None:
        if previous_identity == session.identity:
            self._store.replace(session)
            return
        if previous_identity is not None:
            await self._binder.migrate_out(previous_identity)
        self._store.replace(session)
        if session.identity is not None:
            await self._binder.bind_in(session.identity, self._seed_balance(session))

    async def _deactivate(self, kind: BackendKind) -> None:
        if self._account_subscription is not None:
            self._account_subscription.cancel()
            self._account_subscription = None
        backend = self._backends.get(kind)
        if backend is not None:
            await self._disconnect_quietly(backend)

    async def _disconnect_quietly(self, backend: CredentialBackend) -> None:
        try:
            await backend.disconnect()
        except Exception as e:
            # Best effort: the session is cleared regardless.
            logger.warning(f"Backend {backend.kind.value} disconnect failed: {e}")

    def _replace_if_current(self, session: Session) -> None:
        current = self.session
        if current.backend_kind == session.backend_kind and current.identity == session.identity:
            self._store.replace(session)

    def _on_accounts_changed(self, kind: BackendKind, session: Optional[Session]) -> None:
        task = asyncio.get_running_loop().create_task(self._handle_account_change(kind, session))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle_account_change(self, kind: BackendKind, session: Optional[Session]) -> None:
        async with self._lock:
            current = self.session
            # Events from a backend that is no longer active are stale.
            if current.backend_kind != kind:
                return

            if session is None:
                logger.info(f"{current.backend_kind.value} accounts removed, dropping session")
                await self._binder.migrate_out(current.identity)
                if self._account_subscription is not None:
                    self._account_subscription.cancel()
                    self._account_subscription = None
                self._store.clear()
                self._emit(IdentityBinding(current.identity, None))
                return

            if session.identity == current.identity:
                self._store.replace(session)
                return

            logger.info(f"{current.backend_kind.value} account switched")
            await self._rebind(current.identity, session)
            self._emit(IdentityBinding(current.identity, session.identity))

    def _emit(self, event: IdentityBinding) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("IdentityBinding listener failed")


def create_session_manager(
    environment: Optional[HostEnvironment] = None,
    storage: Optional[KeyValueStorage] = None,
    binder: Optional[GameStateBinder] = None,
    faucet: Optional[FaucetClient] = None,
) -> WalletSessionManager:
    """Wire the three backends with the configured storage and defaults.

    Without an explicit binder, per-identity game state is kept in process.
    """
    environment = environment or HostEnvironment()
    storage = storage or FileKeyValueStorage(settings.storage_path)
    backends: Dict[BackendKind, CredentialBackend] = {
        BackendKind.LOCAL_SIMULATED: LocalSimulatedBackend(
            LocalCredentialStore(storage),
            starting_balance=settings.local_starting_balance,
        ),
        BackendKind.NATIVE_EXTENSION: NativeExtensionBackend(environment),
        BackendKind.BRIDGED_PROVIDER: BridgedProviderBackend(environment),
    }
    return WalletSessionManager(
        backends,
        binder=binder or InMemoryGameStateBinder(),
        faucet=faucet,
        fallback_seed_balance=settings.fallback_seed_balance,
        faucet_simulated_amount=settings.faucet_simulated_amount,
        environment=environment,
    )


# Singleton instance
_session_manager: Optional[WalletSessionManager] = None


def get_session_manager() -> WalletSessionManager:
    """Get the singleton session manager instance."""
    global _session_manager
    if _session_manager is None:
        _session_manager = create_session_manager()
    return _session_manager


def set_session_manager(manager: Optional[WalletSessionManager]) -> None:
    global _session_manager
    _session_manager = manager
