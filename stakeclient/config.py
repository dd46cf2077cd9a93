from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

# Network presets for the node service and faucet
NETWORK_PRESETS: Dict[str, Dict[str, str]] = {
    "testnet": {
        "faucet_url": "https://faucet.testnet-conway.linera.net",
        "node_service_url": "https://rpc.testnet-conway.linera.net",
    },
    "local": {
        "faucet_url": "http://localhost:8080/faucet",
        "node_service_url": "http://localhost:8080",
    },
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Fill network-derived URLs from the selected preset."""

        super().model_post_init(__context)

        preset = NETWORK_PRESETS.get(self.network, NETWORK_PRESETS["local"])
        if not self.node_service_url:
            object.__setattr__(self, "node_service_url", preset["node_service_url"])
        if not self.faucet_url:
            object.__setattr__(self, "faucet_url", preset["faucet_url"])

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Local control API host")
    port: int = Field(default=8787, description="Local control API port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="auto", description="json, console, or auto (console on a terminal)")

    # Network Settings
    network: str = Field(
        default="local",
        description="Network preset (local, testnet)",
        validation_alias=AliasChoices("network", "stake_network", "VITE_NETWORK"),
    )
    node_service_url: str = Field(default="", description="Node service base URL")
    faucet_url: str = Field(default="", description="Faucet base URL")
    app_id: str = Field(
        default="",
        description="Deployed application ID",
        validation_alias=AliasChoices("app_id", "stake_app_id", "VITE_APP_ID"),
    )
    use_mock_data: bool = Field(default=False, description="Force mock responses regardless of reachability")

    # Reachability Probing
    probe_timeout_seconds: float = Field(default=5.0, description="Per-request probe timeout")
    probe_interval_seconds: float = Field(default=30.0, description="Seconds between probe cycles")
    probe_endpoints: Dict[str, str] = Field(
        default_factory=lambda: {
            "devnet": "https://devnet.linera.dev",
            "testnet": "https://testnet.linera.net",
            "local": "http://localhost:8080",
        },
        description="Ordered candidate endpoints keyed by network name",
    )
    custom_endpoint: Optional[str] = Field(default=None, description="Endpoint tried before the candidates")

    # Local Wallet
    storage_path: Path = Field(
        default=BASE_DIR / ".stakeclient" / "storage.json",
        description="Device-local key-value storage file",
    )
    local_starting_balance: str = Field(default="10000", description="Starting balance of a new local wallet")
    faucet_simulated_amount: str = Field(default="10000", description="Tokens added by the simulated faucet")
    fallback_seed_balance: str = Field(default="10000", description="Seed balance for identities seen for the first time")

    # Game constants (advisory only, enforced remotely)
    min_steal_stake: Decimal = Field(default=Decimal("1000"), description="Minimum stake for a guaranteed steal")
    steal_percentage: int = Field(default=15, description="Percentage taken during a steal")

    def probe_candidates(self) -> Dict[str, str]:
        """Configured probe endpoints, then the selected network's node service.

        The node service is skipped when it is already a candidate.
        """
        candidates = dict(self.probe_endpoints)
        known = {url.rstrip("/") for url in candidates.values()}
        if self.node_service_url and self.node_service_url.rstrip("/") not in known:
            candidates[f"{self.network}-node"] = self.node_service_url
        return candidates


settings = Settings()
