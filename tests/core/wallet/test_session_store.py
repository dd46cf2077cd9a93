import json

import pytest

from stakeclient.core.errors import StorageError
from stakeclient.core.wallet.models import BackendKind, Session
from stakeclient.core.wallet.session_store import LOCAL_WALLET_KEY, LocalCredentialStore, SessionStore
from stakeclient.storage import MemoryKeyValueStorage


@pytest.fixture
def storage():
    return MemoryKeyValueStorage()


@pytest.fixture
def store(storage):
    return LocalCredentialStore(storage)


def test_wallet_key_matches_persisted_format():
    assert LOCAL_WALLET_KEY == "stake-and-steal-demo-wallet"


@pytest.mark.asyncio
async def test_get_or_create_creates_once(store):
    record, created = await store.get_or_create("10000")
    again, created_again = await store.get_or_create("500")

    assert created is True
    assert created_again is False
    assert again == record
    assert again.balance == "10000"


@pytest.mark.asyncio
async def test_update_preserves_secret(store):
    record, _ = await store.get_or_create("10000")

    def tamper(r):
        r.balance = "1"
        r.secret_material = "replaced"

    updated = await store.update(tamper)

    assert updated.balance == "1"
    assert updated.secret_material == record.secret_material
    assert store.load().secret_material == record.secret_material


@pytest.mark.asyncio
async def test_update_without_record_raises(store):
    with pytest.raises(StorageError):
        await store.update(lambda r: None)


def test_malformed_record_loads_as_none(storage, store):
    storage.set(LOCAL_WALLET_KEY, {"owner": 12, "chainId": "c", "privateKey": "k"})
    assert store.load() is None

    storage.set(LOCAL_WALLET_KEY, ["not", "a", "record"])
    assert store.load() is None
    assert store.exists() is False


@pytest.mark.asyncio
async def test_clear_removes_record(store):
    await store.get_or_create("10000")
    await store.clear()

    assert store.load() is None


@pytest.mark.asyncio
async def test_export_is_pretty_json(store):
    assert store.export_json() is None

    record, _ = await store.get_or_create("10000")
    exported = store.export_json()

    assert "\n" in exported
    assert json.loads(exported)["owner"] == record.identity


@pytest.mark.asyncio
async def test_import_validates_payload(store):
    assert await store.import_json("not json") is False
    assert await store.import_json(json.dumps({"owner": "User:a"})) is False
    assert store.load() is None

    payload = json.dumps({"owner": "User:a", "chainId": "demo-chain-b", "privateKey": "k"})
    assert await store.import_json(payload) is True
    assert store.load().identity == "User:a"


def test_session_store_replace_and_clear():
    sessions = SessionStore()
    session = Session(backend_kind=BackendKind.LOCAL_SIMULATED, identity="User:a")

    assert sessions.replace(session) == Session.none()
    assert sessions.current == session
    assert sessions.clear() == session
    assert not sessions.current.connected
