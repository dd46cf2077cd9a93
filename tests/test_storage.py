from stakeclient.storage import FileKeyValueStorage, MemoryKeyValueStorage


def test_memory_storage_returns_copies():
    storage = MemoryKeyValueStorage({"wallet": {"balance": "1"}})

    value = storage.get("wallet")
    value["balance"] = "999"

    assert storage.get("wallet") == {"balance": "1"}
    assert storage.keys() == ["wallet"]


def test_memory_storage_delete_missing_key():
    storage = MemoryKeyValueStorage()

    storage.delete("absent")

    assert storage.get("absent") is None


def test_file_storage_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    FileKeyValueStorage(path).set("wallet", {"owner": "User:a"})

    reopened = FileKeyValueStorage(path)

    assert reopened.get("wallet") == {"owner": "User:a"}
    assert not path.with_suffix(".json.tmp").exists()


def test_file_storage_delete(tmp_path):
    storage = FileKeyValueStorage(tmp_path / "storage.json")
    storage.set("a", 1)
    storage.set("b", 2)

    storage.delete("a")

    assert storage.get("a") is None
    assert storage.get("b") == 2


def test_file_storage_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json")

    storage = FileKeyValueStorage(path)

    assert storage.get("wallet") is None
    storage.set("wallet", {"owner": "User:b"})
    assert storage.get("wallet") == {"owner": "User:b"}
