"""Unit tests for the key-value storage capability."""

import json

import pytest

from shared.storage.kv import JsonFileStore, MemoryStore, StorageUnavailable, UnavailableStore


class TestMemoryStore:
    @pytest.mark.unit
    def test_get_missing_is_none(self):
        assert MemoryStore().get("missing") is None

    @pytest.mark.unit
    def test_values_are_strings(self):
        store = MemoryStore()
        store.set("count", 12)

        assert store.get("count") == "12"

    @pytest.mark.unit
    def test_snapshot_is_a_copy(self):
        store = MemoryStore({"a": "1"})
        snap = store.snapshot()
        snap["a"] = "2"

        assert store.get("a") == "1"


class TestJsonFileStore:
    @pytest.mark.unit
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "state" / "widget_storage.json"
        JsonFileStore(path).set("bgmMuted", "true")

        assert JsonFileStore(path).get("bgmMuted") == "true"
        assert json.loads(path.read_text(encoding="utf-8")) == {"bgmMuted": "true"}

    @pytest.mark.unit
    def test_set_keeps_other_keys(self, tmp_path):
        store = JsonFileStore(tmp_path / "s.json")
        store.set("a", "1")
        store.set("b", "2")

        assert store.get("a") == "1"
        assert store.get("b") == "2"

    @pytest.mark.unit
    def test_missing_file_reads_as_empty(self, tmp_path):
        assert JsonFileStore(tmp_path / "nope.json").get("a") is None

    @pytest.mark.unit
    def test_corrupt_file_is_unavailable(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageUnavailable):
            JsonFileStore(path).get("a")

    @pytest.mark.unit
    def test_non_object_root_is_ignored(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text("[1, 2]", encoding="utf-8")
        store = JsonFileStore(path)

        assert store.get("a") is None
        store.set("a", "1")
        assert store.get("a") == "1"


class TestUnavailableStore:
    @pytest.mark.unit
    def test_every_access_raises(self):
        store = UnavailableStore("private browsing")

        with pytest.raises(StorageUnavailable, match="private browsing"):
            store.get("a")
        with pytest.raises(StorageUnavailable):
            store.set("a", "1")


class TestCorruptFileRecovery:
    @pytest.mark.unit
    def test_write_replaces_corrupt_file(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text("{truncated", encoding="utf-8")
        store = JsonFileStore(path)

        store.set("a", "1")

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}
        assert store.get("a") == "1"
