"""
Wallet Error Classification

Defines the error taxonomy surfaced by credential backends and the session
manager. Every error carries a category and a user-actionable message so
callers can tell a missing extension from a rejected prompt from a busy
session.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of wallet and probe errors."""

    BACKEND_UNAVAILABLE = "backend_unavailable"  # Prerequisite missing
    USER_REJECTED = "user_rejected"              # Prompt declined
    NOT_CONNECTED = "not_connected"              # Needs an active session
    OPERATION_IN_PROGRESS = "operation_in_progress"
    INVALID_BACKEND = "invalid_backend"
    PROBE_TIMEOUT = "probe_timeout"
    PROBE_NETWORK = "probe_network"
    STORAGE = "storage"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    recoverable: bool = True
    suggested_action: Optional[str] = None
    backend: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class WalletError(Exception):
    """Base class for session and backend errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    recoverable: bool = True
    default_message: str = "Wallet operation failed"
    suggested_action: Optional[str] = None

    def __init__(
        self,
        message: Optional[str] = None,
        backend: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.context = ErrorContext(
            category=self.category,
            recoverable=self.recoverable,
            suggested_action=self.suggested_action,
            backend=backend,
            details=details or {},
        )

    @property
    def user_message(self) -> str:
        if self.suggested_action:
            return f"{self.message}. {self.suggested_action}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.category.value,
            "message": self.user_message,
            "recoverable": self.recoverable,
            "backend": self.context.backend,
        }


class BackendUnavailable(WalletError):
    """The backend's prerequisite (extension, injected provider) is absent."""

    category = ErrorCategory.BACKEND_UNAVAILABLE
    default_message = "Wallet backend is not available"
    suggested_action = "Install the wallet extension or choose another wallet"


class UserRejected(WalletError):
    """The user declined an interactive prompt."""

    category = ErrorCategory.USER_REJECTED
    default_message = "Request was rejected in the wallet"
    suggested_action = "Approve the request in your wallet to continue"


class NotConnected(WalletError):
    """The operation requires an active session."""

    category = ErrorCategory.NOT_CONNECTED
    recoverable = False
    default_message = "No wallet connected"
    suggested_action = "Connect a wallet first"


class OperationInProgress(WalletError):
    """Another connect/disconnect is still pending."""

    category = ErrorCategory.OPERATION_IN_PROGRESS
    default_message = "A wallet connection is already in progress"
    suggested_action = "Wait for it to finish and try again"


class InvalidBackend(WalletError):
    """Unknown backend kind, or the backend reports itself unavailable."""

    category = ErrorCategory.INVALID_BACKEND
    default_message = "Unknown or unavailable wallet backend"
    suggested_action = "Choose one of the available wallets"


class StorageError(WalletError):
    """The device-local record could not be read or written."""

    category = ErrorCategory.STORAGE
    default_message = "Local wallet storage failed"


# Probe errors never leave the reachability prober; they are absorbed
# into ReachabilityStatus.error.
class ProbeError(Exception):
    """Base class for reachability check failures."""

    category: ErrorCategory = ErrorCategory.PROBE_NETWORK

    def __init__(self, endpoint: str, message: str):
        super().__init__(message)
        self.endpoint = endpoint
        self.message = message


class ProbeTimeout(ProbeError):
    """A probe request exceeded its timeout."""

    category = ErrorCategory.PROBE_TIMEOUT


class ProbeNetworkError(ProbeError):
    """A probe request failed (connection error or non-success status)."""

    category = ErrorCategory.PROBE_NETWORK
