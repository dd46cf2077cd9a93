from .requests import BalanceAdjustRequest, ConnectRequest, RefreshRequest, SignRequest
from .responses import (
    BackendsResponse,
    DiscoveredPlayerResponse,
    FaucetResponse,
    NetworkStatusResponse,
    PlayersResponse,
    SessionResponse,
    SignResponse,
)

__all__ = [
    "BalanceAdjustRequest",
    "ConnectRequest",
    "RefreshRequest",
    "SignRequest",
    "BackendsResponse",
    "FaucetResponse",
    "NetworkStatusResponse",
    "SessionResponse",
    "SignResponse",
    "DiscoveredPlayerResponse",
    "PlayersResponse",
]
