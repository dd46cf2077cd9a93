"""
Stake and Steal client core.

Wallet session management across three credential backends, plus network
reachability probing with mock-mode fallback.
"""

from .core.errors import (
    BackendUnavailable,
    InvalidBackend,
    NotConnected,
    OperationInProgress,
    UserRejected,
    WalletError,
)
from .core.wallet.models import BackendKind, IdentityBinding, Session
from .core.wallet.session_manager import (
    WalletSessionManager,
    create_session_manager,
    get_session_manager,
)
from .services.reachability import ReachabilityProber, ReachabilityStatus

__version__ = "0.1.0"

__all__ = [
    "BackendUnavailable",
    "InvalidBackend",
    "NotConnected",
    "OperationInProgress",
    "UserRejected",
    "WalletError",
    "BackendKind",
    "IdentityBinding",
    "Session",
    "WalletSessionManager",
    "create_session_manager",
    "get_session_manager",
    "ReachabilityProber",
    "ReachabilityStatus",
]
