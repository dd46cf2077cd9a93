import pytest

from stakeclient.core.wallet.binder import InMemoryGameStateBinder, NullGameStateBinder


@pytest.mark.asyncio
async def test_bind_in_seeds_unseen_identity():
    binder = InMemoryGameStateBinder()

    await binder.bind_in("User:a", "10000")

    assert binder.current_identity == "User:a"
    assert binder.current.balance == "10000"


@pytest.mark.asyncio
async def test_bind_in_keeps_existing_state():
    binder = InMemoryGameStateBinder()
    await binder.bind_in("User:a", "10000")
    binder.current.balance = "7"
    await binder.migrate_out("User:a")

    await binder.bind_in("User:a", "10000")

    assert binder.current.balance == "7"


@pytest.mark.asyncio
async def test_migrate_out_publishes_for_discovery():
    binder = InMemoryGameStateBinder()
    await binder.bind_in("User:a", "10000")
    await binder.migrate_out("User:a")
    await binder.bind_in("User:b", "10000")

    discovered = binder.discover()

    assert [p.identity for p in discovered] == ["User:a"]
    assert binder.current_identity == "User:b"


@pytest.mark.asyncio
async def test_migrate_out_unknown_identity_is_harmless():
    binder = InMemoryGameStateBinder()

    await binder.migrate_out("User:ghost")

    assert binder.discover() == []
    assert binder.current is None


@pytest.mark.asyncio
async def test_null_binder_accepts_everything():
    binder = NullGameStateBinder()

    await binder.bind_in("User:a", "1")
    await binder.migrate_out("User:a")


@pytest.mark.asyncio
async def test_discover_with_explicit_exclude():
    binder = InMemoryGameStateBinder()
    for identity in ("User:a", "User:b"):
        await binder.bind_in(identity, "10000")
        await binder.migrate_out(identity)

    assert [p.identity for p in binder.discover(exclude="User:a")] == ["User:b"]
    assert len(binder.discover()) == 2
