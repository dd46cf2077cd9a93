from stakeclient.core.errors import (
    BackendUnavailable,
    ErrorCategory,
    NotConnected,
    OperationInProgress,
    UserRejected,
    WalletError,
)
from stakeclient.core.events import Subscription
from stakeclient.core.wallet.models import BackendKind
from stakeclient.providers.base import classify_backend_error, is_user_rejection


class RpcError(Exception):
    def __init__(self, code, message):
        super().__init__(message)
        self.code = code


class TestErrorTaxonomy:
    """Tests for wallet error categories and messages."""

    def test_defaults(self):
        error = BackendUnavailable()

        assert error.category == ErrorCategory.BACKEND_UNAVAILABLE
        assert error.message == "Wallet backend is not available"
        assert error.context.recoverable is True

    def test_not_connected_is_unrecoverable(self):
        assert NotConnected().context.recoverable is False

    def test_to_dict(self):
        error = UserRejected("Signature declined", backend="bridged-provider")

        assert error.to_dict() == {
            "error": "user_rejected",
            "message": "Signature declined. Approve the request in your wallet to continue",
            "recoverable": True,
            "backend": "bridged-provider",
        }

    def test_details_are_kept(self):
        error = OperationInProgress(details={"operation": "connect"})

        assert error.context.details == {"operation": "connect"}


class TestClassification:
    """Tests for mapping raw backend exceptions."""

    def test_code_4001(self):
        assert is_user_rejection(RpcError(4001, "nope"))

    def test_rejection_text(self):
        assert is_user_rejection(Exception("MetaMask Tx Signature: User denied transaction signature."))
        assert not is_user_rejection(Exception("network down"))

    def test_classify_rejection(self):
        error = classify_backend_error(RpcError(4001, "rejected"), BackendKind.BRIDGED_PROVIDER, "sign")

        assert isinstance(error, UserRejected)
        assert error.context.details["operation"] == "sign"

    def test_classify_passes_wallet_errors_through(self):
        original = NotConnected()

        assert classify_backend_error(original, BackendKind.NATIVE_EXTENSION, "sign") is original

    def test_classify_other_errors(self):
        error = classify_backend_error(RuntimeError("boom"), BackendKind.NATIVE_EXTENSION, "connect")

        assert type(error) is WalletError
        assert error.message == "native-extension connect failed: boom"


def test_subscription_cancels_once():
    calls = []
    subscription = Subscription(lambda: calls.append("cancelled"))

    assert subscription.active
    assert subscription.cancel() is True
    assert subscription.cancel() is False
    assert not subscription.active
    assert calls == ["cancelled"]
