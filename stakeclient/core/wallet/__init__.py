"""
Wallet session core.

Models, the session store and the game state binding interface. The
session manager lives in `stakeclient.core.wallet.session_manager`.
"""

from .binder import (
    DiscoveredPlayer,
    GameStateBinder,
    InMemoryGameStateBinder,
    NullGameStateBinder,
    PlayerState,
)
from .models import (
    BackendKind,
    IdentityBinding,
    LocalCredentialRecord,
    Session,
    normalize_balance,
)
from .session_store import LOCAL_WALLET_KEY, LocalCredentialStore, SessionStore

__all__ = [
    "DiscoveredPlayer",
    "GameStateBinder",
    "InMemoryGameStateBinder",
    "NullGameStateBinder",
    "PlayerState",
    "BackendKind",
    "IdentityBinding",
    "LocalCredentialRecord",
    "Session",
    "normalize_balance",
    "LOCAL_WALLET_KEY",
    "LocalCredentialStore",
    "SessionStore",
]
