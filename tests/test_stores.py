import json

import pytest

from pairs.persistence.channel import StorageChannel
from pairs.persistence.stores import JsonFileStore, KeyValueStore, MemoryStore


def test_memory_store_basic_operations():
    store = MemoryStore({"a": "1"})
    assert isinstance(store, KeyValueStore)
    assert store.get("a") == "1"
    store.set("b", "2")
    assert sorted(store.keys()) == ["a", "b"]
    store.remove("a")
    store.remove("missing")
    assert store.get("a") is None
    with pytest.raises(TypeError):
        store.set("c", 3)


def test_json_file_store_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "shared.json"
    first = JsonFileStore(path)
    first.set("totalMovesAcrossTabs", "4")

    second = JsonFileStore(path)
    assert second.get("totalMovesAcrossTabs") == "4"
    with path.open("r", encoding="utf-8") as handle:
        assert json.load(handle) == {"totalMovesAcrossTabs": "4"}

    second.remove("totalMovesAcrossTabs")
    assert first.get("totalMovesAcrossTabs") is None


def test_json_file_store_reads_latest_value_written_elsewhere(tmp_path):
    path = tmp_path / "shared.json"
    mine = JsonFileStore(path)
    other = JsonFileStore(path)
    mine.set("k", "1")
    other.set("k", "2")
    assert mine.get("k") == "2"


def test_json_file_store_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "shared.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)
    assert store.get("anything") is None
    store.set("k", "v")
    assert store.get("k") == "v"

    path.write_text("[1, 2]", encoding="utf-8")
    assert list(store.keys()) == []


def test_json_file_store_tolerates_non_utf8_file(tmp_path):
    path = tmp_path / "shared.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    store = JsonFileStore(path)
    assert store.get("anything") is None
    assert store.poll() == []

    store.set("k", "v")
    path.write_bytes(b"\xff\xfe")
    assert store.poll() == ["k"]
    assert list(store.keys()) == []


def test_poll_reports_foreign_writes_only(tmp_path):
    path = tmp_path / "shared.json"
    channel = StorageChannel()
    notified = []
    channel.subscribe(lambda origin, **payload: notified.append(payload["key"]))
    watcher = JsonFileStore(path, channel=channel)
    writer = JsonFileStore(path)

    watcher.set("own", "1")
    assert watcher.poll() == []

    writer.set("foreign", "1")
    writer.set("own", "2")
    assert watcher.poll() == ["foreign", "own"]
    assert notified == ["foreign", "own"]
    assert watcher.poll() == []


def test_storage_channel_unsubscribe():
    channel = StorageChannel()
    seen = []

    def receiver(origin, **payload):
        seen.append((origin, payload["key"]))

    channel.subscribe(receiver)
    channel.publish("k", origin="tab-1")
    channel.unsubscribe(receiver)
    channel.publish("k", origin="tab-2")
    assert seen == [("tab-1", "k")]
