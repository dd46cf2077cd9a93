"""
Session store.

Holds the single active Session and the durable local credential record.
Only the local simulated wallet is persisted; every record mutation is a
read-modify-write of the full record under one lock.
"""

import asyncio
import json
import logging
from typing import Callable, Optional

from ..errors import StorageError
from .models import LocalCredentialRecord, Session
from ...storage import KeyValueStorage

logger = logging.getLogger(__name__)

LOCAL_WALLET_KEY = "stake-and-steal-demo-wallet"


class LocalCredentialStore:
    """Durable storage for the single local credential record."""

    def __init__(self, storage: KeyValueStorage, key: str = LOCAL_WALLET_KEY):
        self._storage = storage
        self._key = key
        self._lock = asyncio.Lock()

    def load(self) -> Optional[LocalCredentialRecord]:
        """Read the record, or None if absent or unreadable."""
        try:
            data = self._storage.get(self._key)
        except OSError as e:
            logger.error(f"Failed to load local wallet: {e}")
            return None
        if not data:
            return None
        try:
            return LocalCredentialRecord.from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Ignoring malformed local wallet record: {e}")
            return None

    def exists(self) -> bool:
        return self.load() is not None

    def _save(self, record: LocalCredentialRecord) -> None:
        try:
            self._storage.set(self._key, record.to_dict())
        except OSError as e:
            raise StorageError(f"Failed to save local wallet: {e}") from e

    async def get_or_create(self, starting_balance: str) -> tuple[LocalCredentialRecord, bool]:
        """Return the existing record or create one. The flag is True on creation."""
        async with self._lock:
            record = self.load()
            if record is not None:
                return record, False
            record = LocalCredentialRecord.generate(starting_balance)
            self._save(record)
            logger.info(f"Created local wallet {record.identity[:16]}...")
            return record, True

    async def update(
        self, mutate: Callable[[LocalCredentialRecord], None]
    ) -> LocalCredentialRecord:
        """Apply `mutate` to a freshly loaded record and write it back.

        Raises:
            StorageError: If no record exists
        """
        async with self._lock:
            record = self.load()
            if record is None:
                raise StorageError("Local wallet not found")
            secret = record.secret_material
            mutate(record)
            record.secret_material = secret
            self._save(record)
            return record

    async def clear(self) -> None:
        async with self._lock:
            try:
                self._storage.delete(self._key)
            except OSError as e:
                raise StorageError(f"Failed to clear local wallet: {e}") from e

    def export_json(self) -> Optional[str]:
        record = self.load()
        if record is None:
            return None
        return json.dumps(record.to_dict(), indent=2)

    async def import_json(self, payload: str) -> bool:
        """Replace the record with an exported one. Returns False if invalid."""
        try:
            record = LocalCredentialRecord.from_dict(json.loads(payload))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Rejected local wallet import: {e}")
            return False
        async with self._lock:
            self._save(record)
        return True


class SessionStore:
    """Owner of the single active Session."""

    def __init__(self) -> None:
        self._session = Session.none()

    @property
    def current(self) -> Session:
        return self._session

    def replace(self, session: Session) -> Session:
        """Swap in a new session, returning the previous one."""
        previous = self._session
        self._session = session
        return previous

    def clear(self) -> Session:
        return self.replace(Session.none())
