from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SessionResponse(BaseModel):
    backend_kind: str = Field(description="Active backend kind, 'none' when disconnected")
    connected: bool = Field(description="Whether a wallet is connected")
    identity: Optional[str] = Field(default=None, description="Active identity")
    account_handles: List[str] = Field(default_factory=list, description="Chain/account handles of the identity")
    balance: str = Field(default="0", description="Advisory balance")
    public_key: Optional[str] = Field(default=None, description="Backend-native address, if any")


class BackendsResponse(BaseModel):
    available: Dict[str, bool] = Field(description="Availability per backend kind")
    detected_wallets: List[str] = Field(default_factory=list, description="Injected wallets found in the host")


class SignResponse(BaseModel):
    signature: str = Field(description="Signature produced by the active backend")
    backend_kind: str = Field(description="Backend that signed")


class FaucetResponse(BaseModel):
    success: bool
    message: str
    amount: Optional[str] = None
    chain_id: Optional[str] = None
    error: Optional[str] = None


class NetworkStatusResponse(BaseModel):
    connected: bool = Field(description="Whether a live endpoint was found")
    selected_endpoint: Optional[str] = Field(default=None, description="Endpoint that answered")
    network_kind: str = Field(description="devnet, testnet, mainnet, local, mock or unknown")
    network_name: str = Field(description="Display name of the network")
    is_mock_mode: bool = Field(description="Whether the client runs on mock data")
    latency_ms: Optional[float] = Field(default=None, description="Probe round trip")
    last_checked_at: Optional[datetime] = Field(default=None, description="When the last cycle finished")
    error: Optional[str] = Field(default=None, description="Why no endpoint is connected")


class DiscoveredPlayerResponse(BaseModel):
    identity: str
    name: str
    chain_id: str
    total_staked: str
    registered_at: int


class PlayersResponse(BaseModel):
    current_identity: Optional[str] = Field(default=None, description="Identity bound to the game state")
    players: List[DiscoveredPlayerResponse] = Field(default_factory=list, description="Other registered identities")
