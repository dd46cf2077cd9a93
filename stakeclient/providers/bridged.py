"""
Bridged provider backend (MetaMask signing for Linera identities).

The bridge has no notion of Linera accounts, so the identity is derived
from the Ethereum address and no account handles are exposed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from eth_utils import is_address, to_checksum_address

from ..core.errors import BackendUnavailable, NotConnected, UserRejected, WalletError
from ..core.wallet.models import LOCAL_IDENTITY_PREFIX, BackendKind, Session
from .base import AccountsListener, HostEnvironment, Subscription, classify_backend_error

logger = logging.getLogger(__name__)

ETHEREUM_BINDING = "ethereum"
OKX_BINDING = "okxwallet"
ACCOUNTS_CHANGED = "accountsChanged"
_OWNER_PADDING = "0" * 24


class InjectedProvider(Protocol):
    """EIP-1193 style provider injected into the host."""

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        ...

    def on(self, event: str, callback: Callable[..., None]) -> None:
        ...

    def remove_listener(self, event: str, callback: Callable[..., None]) -> None:
        ...


@dataclass
class DetectedWallet:
    name: str
    provider: Any
    icon: str = "default"


def _is_metamask(provider: Any) -> bool:
    return bool(getattr(provider, "is_metamask", False)) and not getattr(provider, "is_okx_wallet", False)


def detect_injected_wallets(environment: HostEnvironment) -> List[DetectedWallet]:
    """List the injected wallets present in the host, MetaMask first."""
    ethereum = environment.get(ETHEREUM_BINDING)
    if ethereum is None:
        return []

    wallets: List[DetectedWallet] = []
    if _is_metamask(ethereum):
        wallets.append(DetectedWallet("MetaMask", ethereum, "metamask"))

    okx = environment.get(OKX_BINDING)
    if okx is not None:
        wallets.append(DetectedWallet("OKX Wallet", okx, "okx"))

    for provider in getattr(ethereum, "providers", None) or []:
        if _is_metamask(provider) and not any(w.name == "MetaMask" for w in wallets):
            wallets.append(DetectedWallet("MetaMask", provider, "metamask"))

    if not wallets:
        name = "OKX Wallet" if getattr(ethereum, "is_okx_wallet", False) else "Browser Wallet"
        wallets.append(DetectedWallet(name, ethereum))
    return wallets


def select_metamask_provider(environment: HostEnvironment) -> Optional[Any]:
    """Pick the provider that identifies as MetaMask, ignoring competing wallets."""
    ethereum = environment.get(ETHEREUM_BINDING)
    if ethereum is None:
        return None
    for provider in getattr(ethereum, "providers", None) or []:
        if _is_metamask(provider):
            return provider
    if _is_metamask(ethereum):
        return ethereum
    return None


def derive_identity(address: str) -> str:
    """Map an Ethereum address onto the Linera owner format."""
    hex_part = address.lower()
    if hex_part.startswith("0x"):
        hex_part = hex_part[2:]
    return f"{LOCAL_IDENTITY_PREFIX}{hex_part}{_OWNER_PADDING}"


def address_from_identity(identity: str) -> Optional[str]:
    """Inverse of derive_identity, or None for identities it did not produce."""
    if not identity.startswith(LOCAL_IDENTITY_PREFIX) or not identity.endswith(_OWNER_PADDING):
        return None
    hex_part = identity[len(LOCAL_IDENTITY_PREFIX):-len(_OWNER_PADDING)]
    if len(hex_part) != 40:
        return None
    return f"0x{hex_part}"


class BridgedProviderBackend:
    """Signs through the injected MetaMask provider."""

    kind = BackendKind.BRIDGED_PROVIDER

    def __init__(self, environment: HostEnvironment):
        self.environment = environment
        self._session: Optional[Session] = None
        self._address: Optional[str] = None

    @property
    def address(self) -> Optional[str]:
        return self._address

    def is_available(self) -> bool:
        return select_metamask_provider(self.environment) is not None

    async def probe_existing(self) -> Optional[Session]:
        # Authorization can only be confirmed by prompting.
        return None

    async def connect(self) -> Session:
        provider = select_metamask_provider(self.environment)
        if provider is None:
            raise BackendUnavailable("MetaMask not found", backend=self.kind.value)
        try:
            accounts = await provider.request("eth_requestAccounts", [])
        except Exception as e:
            raise classify_backend_error(e, self.kind, "connect") from e
        if not accounts:
            raise UserRejected("No MetaMask account was authorized", backend=self.kind.value)
        return self._bind_address(str(accounts[0]))

    async def disconnect(self) -> None:
        # MetaMask has no disconnect; only local state is dropped.
        self._session = None
        self._address = None

    async def sign(self, message: str) -> str:
        provider = select_metamask_provider(self.environment)
        if self._session is None or self._address is None:
            raise NotConnected("MetaMask not connected", backend=self.kind.value)
        if provider is None:
            raise BackendUnavailable("MetaMask not found", backend=self.kind.value)
        payload = "0x" + message.encode("utf-8").hex()
        try:
            signature = await provider.request("personal_sign", [payload, self._address])
        except Exception as e:
            raise classify_backend_error(e, self.kind, "sign") from e
        return str(signature)

    def subscribe_account_changes(self, listener: AccountsListener) -> Subscription:
        provider = select_metamask_provider(self.environment)
        if provider is None:
            return Subscription()

        def handler(accounts: Any) -> None:
            try:
                session = self.apply_accounts([str(a) for a in (accounts or [])])
            except WalletError as e:
                logger.warning(f"Dropping MetaMask session after bad account event: {e}")
                session = self.apply_accounts([])
            listener(session)

        provider.on(ACCOUNTS_CHANGED, handler)
        return Subscription(lambda: provider.remove_listener(ACCOUNTS_CHANGED, handler))

    def apply_accounts(self, accounts: List[str]) -> Optional[Session]:
        """Update the session from an account-change event; None means downgrade."""
        if not accounts:
            self._session = None
            self._address = None
            return None
        return self._bind_address(accounts[0])

    def _bind_address(self, address: str) -> Session:
        if not is_address(address):
            raise classify_backend_error(
                ValueError(f"invalid account address {address!r}"), self.kind, "connect"
            )
        self._address = address.lower()
        self._session = Session(
            backend_kind=self.kind,
            identity=derive_identity(address),
            account_handles=(),
            balance="0",
            public_key=to_checksum_address(address),
        )
        return self._session
