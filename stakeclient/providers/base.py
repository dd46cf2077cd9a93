"""
Credential backend capability set.

Every backend satisfies the same contract and carries an explicit `kind`
tag; the session manager selects backends by that tag only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from ..core.errors import UserRejected, WalletError
from ..core.events import Subscription
from ..core.wallet.models import BackendKind, Session

# Receives the re-derived session, or None when the account went away
AccountsListener = Callable[[Optional[Session]], None]

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001
_REJECTION_HINTS = ("user rejected", "user denied", "rejected by user", "cancelled by user")


@dataclass
class HostEnvironment:
    """Named global bindings visible to the client (extension, injected providers)."""
    bindings: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str) -> Optional[Any]:
        return self.bindings.get(name)

    def has(self, name: str) -> bool:
        return self.bindings.get(name) is not None


@runtime_checkable
class CredentialBackend(Protocol):
    """Operations every credential backend provides."""

    kind: BackendKind

    def is_available(self) -> bool:
        """Non-interactive prerequisite check."""
        ...

    async def probe_existing(self) -> Optional[Session]:
        """Return a restorable session without prompting the user."""
        ...

    async def connect(self) -> Session:
        """Interactively establish a session."""
        ...

    async def disconnect(self) -> None:
        ...

    async def sign(self, message: str) -> str:
        ...

    def subscribe_account_changes(self, listener: AccountsListener) -> Subscription:
        ...


def is_user_rejection(exc: BaseException) -> bool:
    code = getattr(exc, "code", None)
    if code == USER_REJECTED_CODE:
        return True
    text = str(exc).lower()
    return any(hint in text for hint in _REJECTION_HINTS)


def classify_backend_error(exc: Exception, backend: BackendKind, operation: str) -> WalletError:
    """Wrap a raw backend exception in the wallet error taxonomy."""
    if isinstance(exc, WalletError):
        return exc
    if is_user_rejection(exc):
        return UserRejected(backend=backend.value, details={"operation": operation, "cause": str(exc)})
    return WalletError(
        f"{backend.value} {operation} failed: {exc}",
        backend=backend.value,
        details={"operation": operation},
    )
