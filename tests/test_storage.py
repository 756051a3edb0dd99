"""Tests for key/value stores."""

import json

import pytest

from hb_analytics.storage import MemoryStore, JsonFileStore


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_get_missing(self):
        assert MemoryStore().get_item("missing") is None

    def test_set_overwrites(self):
        store = MemoryStore({"k": "old"})
        store.set_item("k", "new")
        assert store.get_item("k") == "new"


class TestJsonFileStore:
    """Tests for JsonFileStore."""

    def test_missing_file_reads_none(self, temp_data_dir):
        store = JsonFileStore(temp_data_dir / "store.json")
        assert store.get_item("k") is None

    def test_set_creates_file(self, temp_data_dir):
        path = temp_data_dir / "nested" / "store.json"
        store = JsonFileStore(path)

        store.set_item("a", "1")
        store.set_item("b", "2")

        assert json.loads(path.read_text()) == {"a": "1", "b": "2"}
        assert JsonFileStore(path).get_item("a") == "1"

    def test_corrupt_file_raises(self, temp_data_dir):
        path = temp_data_dir / "store.json"
        path.write_text("not json")
        with pytest.raises(ValueError):
            JsonFileStore(path).get_item("a")

    def test_non_object_file_raises(self, temp_data_dir):
        path = temp_data_dir / "store.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            JsonFileStore(path).get_item("a")

    def test_non_string_value_raises(self, temp_data_dir):
        path = temp_data_dir / "store.json"
        path.write_text('{"a": 5}')
        with pytest.raises(ValueError):
            JsonFileStore(path).get_item("a")
