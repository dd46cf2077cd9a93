"""
Session and local credential models.

A Session is the single active credential binding. The local credential
record backs the simulated wallet and is the only durable wallet state.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Tuple
import secrets
import time


LOCAL_IDENTITY_PREFIX = "User:"
LOCAL_CHAIN_PREFIX = "demo-chain-"


class BackendKind(str, Enum):
    """Credential backends a session can be bound to."""
    NONE = "none"
    LOCAL_SIMULATED = "local-simulated"
    NATIVE_EXTENSION = "native-extension"
    BRIDGED_PROVIDER = "bridged-provider"


def normalize_balance(value: Any) -> str:
    """Return a decimal-safe numeric string for a balance value."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f"Invalid balance: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid balance: {value!r}")
    if amount == amount.to_integral_value():
        return str(int(amount))
    return format(amount.normalize(), "f")


@dataclass(frozen=True)
class Session:
    """The active identity binding. Replaced, never mutated."""
    backend_kind: BackendKind = BackendKind.NONE
    identity: Optional[str] = None
    account_handles: Tuple[str, ...] = ()
    balance: str = "0"
    public_key: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "account_handles", tuple(self.account_handles))
        if self.backend_kind == BackendKind.NONE:
            if self.identity is not None or self.account_handles:
                raise ValueError("A session without a backend cannot carry an identity")
        elif not self.identity:
            raise ValueError(f"{self.backend_kind.value} session requires an identity")

    @classmethod
    def none(cls) -> "Session":
        return cls()

    @property
    def connected(self) -> bool:
        return self.backend_kind != BackendKind.NONE

    @property
    def primary_chain(self) -> Optional[str]:
        return self.account_handles[0] if self.account_handles else None

    def with_balance(self, balance: str) -> "Session":
        return replace(self, balance=normalize_balance(balance))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backendKind": self.backend_kind.value,
            "connected": self.connected,
            "identity": self.identity,
            "accountHandles": list(self.account_handles),
            "balance": self.balance,
            "publicKey": self.public_key,
        }


@dataclass
class LocalCredentialRecord:
    """
    Durable record backing the local simulated wallet.

    The secret material never leaves the device and is generated exactly
    once per record.
    """
    identity: str
    local_chain_id: str
    secret_material: str
    balance: str = "10000"
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))

    @classmethod
    def generate(cls, starting_balance: str = "10000") -> "LocalCredentialRecord":
        """Create a record from fresh random bytes."""
        return cls(
            identity=f"{LOCAL_IDENTITY_PREFIX}{secrets.token_hex(32)}",
            local_chain_id=f"{LOCAL_CHAIN_PREFIX}{secrets.token_hex(16)}",
            secret_material=secrets.token_hex(32),
            balance=normalize_balance(starting_balance),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted JSON shape."""
        return {
            "owner": self.identity,
            "chainId": self.local_chain_id,
            "privateKey": self.secret_material,
            "balance": self.balance,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocalCredentialRecord":
        """Create from the persisted JSON shape.

        Raises:
            ValueError: If a required field is missing or malformed
        """
        for key in ("owner", "chainId", "privateKey"):
            if not isinstance(data.get(key), str) or not data[key]:
                raise ValueError(f"Local wallet record missing '{key}'")
        return cls(
            identity=data["owner"],
            local_chain_id=data["chainId"],
            secret_material=data["privateKey"],
            balance=normalize_balance(data.get("balance", "0")),
            created_at=int(data.get("createdAt") or int(time.time() * 1000)),
        )

    def to_session(self) -> Session:
        return Session(
            backend_kind=BackendKind.LOCAL_SIMULATED,
            identity=self.identity,
            account_handles=(self.local_chain_id,),
            balance=self.balance,
        )


@dataclass(frozen=True)
class IdentityBinding:
    """Emitted whenever the active identity changes."""
    previous_identity: Optional[str]
    new_identity: Optional[str]

    @property
    def changed(self) -> bool:
        return self.previous_identity != self.new_identity
