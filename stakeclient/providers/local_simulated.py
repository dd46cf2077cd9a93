"""
Locally simulated wallet backend.

WARNING: simulation only. Signatures are a SHA-256 digest over the message
and the locally stored secret; they prove nothing to a remote ledger. The
record lives in device-local storage and may be lost.
"""

from __future__ import annotations

import hashlib
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..core.errors import NotConnected
from ..core.wallet.models import BackendKind, LocalCredentialRecord, Session, normalize_balance
from ..core.wallet.session_store import LocalCredentialStore
from .base import AccountsListener, Subscription

logger = logging.getLogger(__name__)


def simulated_signature(message: str, secret_material: str) -> str:
    """Deterministic one-way digest standing in for a signature."""
    return hashlib.sha256((message + secret_material).encode("utf-8")).hexdigest()


class LocalSimulatedBackend:
    """Wallet whose identity and balance live entirely on this device."""

    kind = BackendKind.LOCAL_SIMULATED

    def __init__(self, store: LocalCredentialStore, starting_balance: str = "10000"):
        self.store = store
        self.starting_balance = normalize_balance(starting_balance)
        self._session: Optional[Session] = None

    def is_available(self) -> bool:
        return True

    async def probe_existing(self) -> Optional[Session]:
        record = self.store.load()
        if record is None:
            return None
        self._session = record.to_session()
        return self._session

    async def connect(self) -> Session:
        record, created = await self.store.get_or_create(self.starting_balance)
        if created:
            logger.info(f"Local wallet created with balance {record.balance}")
        self._session = record.to_session()
        return self._session

    async def disconnect(self) -> None:
        # The record is kept so the same identity comes back on reconnect.
        self._session = None

    def _require_session(self) -> Session:
        if self._session is None:
            raise NotConnected("Local wallet is not connected", backend=self.kind.value)
        return self._session

    async def sign(self, message: str) -> str:
        self._require_session()
        record = self.store.load()
        if record is None:
            self._session = None
            raise NotConnected("Local wallet record was cleared", backend=self.kind.value)
        return simulated_signature(message, record.secret_material)

    def subscribe_account_changes(self, listener: AccountsListener) -> Subscription:
        return Subscription()

    async def adjust_balance(self, delta: Decimal | int | str) -> Session:
        """Add `delta` (may be negative) to the stored balance.

        Raises:
            NotConnected: If the local wallet is not the active session
            ValueError: If the balance would go negative
        """
        self._require_session()
        try:
            amount = Decimal(str(delta))
        except InvalidOperation as e:
            raise ValueError(f"Invalid balance delta {delta!r}") from e

        def apply(record: LocalCredentialRecord) -> None:
            new_balance = Decimal(record.balance) + amount
            if new_balance < 0:
                raise ValueError(f"Insufficient local balance: {record.balance} < {-amount}")
            record.balance = normalize_balance(new_balance)

        record = await self.store.update(apply)
        self._session = record.to_session()
        return self._session

    async def set_balance(self, balance: str) -> Session:
        self._require_session()
        value = normalize_balance(balance)

        def apply(record: LocalCredentialRecord) -> None:
            record.balance = value

        record = await self.store.update(apply)
        self._session = record.to_session()
        return self._session

    async def clear(self) -> None:
        """Delete the local record. The identity is gone for good."""
        await self.store.clear()
        self._session = None
