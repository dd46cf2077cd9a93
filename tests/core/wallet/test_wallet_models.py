import pytest

from stakeclient.core.wallet.models import (
    BackendKind,
    IdentityBinding,
    LocalCredentialRecord,
    Session,
    normalize_balance,
)


class TestNormalizeBalance:
    """Tests for decimal-safe balance strings."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("10000", "10000"),
            (10000, "10000"),
            ("10000.00", "10000"),
            ("12.50", "12.5"),
            ("0.000001", "0.000001"),
            ("1e3", "1000"),
        ],
    )
    def test_normalizes(self, value, expected):
        assert normalize_balance(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", None, "NaN", "Infinity"])
    def test_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            normalize_balance(value)


class TestSession:
    """Tests for the Session invariant."""

    def test_none_session_is_empty(self):
        session = Session.none()

        assert session.backend_kind == BackendKind.NONE
        assert session.identity is None
        assert session.account_handles == ()
        assert not session.connected
        assert session.primary_chain is None

    def test_none_session_cannot_carry_identity(self):
        with pytest.raises(ValueError):
            Session(identity="User:abc")
        with pytest.raises(ValueError):
            Session(account_handles=("chain",))

    def test_connected_session_requires_identity(self):
        with pytest.raises(ValueError):
            Session(backend_kind=BackendKind.NATIVE_EXTENSION)

    def test_handles_are_frozen_into_tuple(self):
        session = Session(
            backend_kind=BackendKind.NATIVE_EXTENSION,
            identity="0xowner",
            account_handles=["a", "b"],
        )

        assert session.account_handles == ("a", "b")
        assert session.primary_chain == "a"

    def test_with_balance_returns_new_session(self):
        session = Session(backend_kind=BackendKind.LOCAL_SIMULATED, identity="User:x", balance="1")

        updated = session.with_balance("2.0")

        assert updated.balance == "2"
        assert session.balance == "1"

    def test_to_dict(self):
        session = Session(
            backend_kind=BackendKind.BRIDGED_PROVIDER,
            identity="User:x",
            public_key="0xabc",
        )

        assert session.to_dict() == {
            "backendKind": "bridged-provider",
            "connected": True,
            "identity": "User:x",
            "accountHandles": [],
            "balance": "0",
            "publicKey": "0xabc",
        }


class TestLocalCredentialRecord:
    """Tests for the persisted local wallet format."""

    def test_generate_uses_fresh_randomness(self):
        first = LocalCredentialRecord.generate()
        second = LocalCredentialRecord.generate()

        assert first.identity != second.identity
        assert first.secret_material != second.secret_material
        assert first.balance == "10000"

    def test_persisted_shape(self):
        record = LocalCredentialRecord("User:a", "demo-chain-b", "c", "5", 1700000000000)

        assert record.to_dict() == {
            "owner": "User:a",
            "chainId": "demo-chain-b",
            "privateKey": "c",
            "balance": "5",
            "createdAt": 1700000000000,
        }
        assert LocalCredentialRecord.from_dict(record.to_dict()) == record

    @pytest.mark.parametrize("missing", ["owner", "chainId", "privateKey"])
    def test_from_dict_requires_core_fields(self, missing):
        data = LocalCredentialRecord.generate().to_dict()
        del data[missing]

        with pytest.raises(ValueError):
            LocalCredentialRecord.from_dict(data)

    def test_to_session(self):
        record = LocalCredentialRecord("User:a", "demo-chain-b", "c", "42")

        session = record.to_session()

        assert session.backend_kind == BackendKind.LOCAL_SIMULATED
        assert session.identity == "User:a"
        assert session.account_handles == ("demo-chain-b",)
        assert session.balance == "42"


def test_identity_binding_changed():
    assert IdentityBinding(None, "a").changed
    assert IdentityBinding("a", None).changed
    assert not IdentityBinding("a", "a").changed
