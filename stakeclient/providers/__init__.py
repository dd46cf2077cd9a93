from .base import (
    CredentialBackend,
    HostEnvironment,
    Subscription,
    classify_backend_error,
    is_user_rejection,
)
from .bridged import (
    BridgedProviderBackend,
    DetectedWallet,
    address_from_identity,
    derive_identity,
    detect_injected_wallets,
    select_metamask_provider,
)
from .local_simulated import LocalSimulatedBackend, simulated_signature
from .native_extension import NativeExtensionBackend

__all__ = [
    "CredentialBackend",
    "HostEnvironment",
    "Subscription",
    "classify_backend_error",
    "is_user_rejection",
    "BridgedProviderBackend",
    "DetectedWallet",
    "address_from_identity",
    "derive_identity",
    "detect_injected_wallets",
    "select_metamask_provider",
    "LocalSimulatedBackend",
    "simulated_signature",
    "NativeExtensionBackend",
]
