"""Tests for the namespaced settings store."""

import json

import pytest

from template_playground.core.settings import (
    NAMESPACE,
    JsonFileStorage,
    MemoryStorage,
    PersistResult,
    SettingsStore,
)
from template_playground.errors import StorageError


class _BrokenStorage:
    """Storage whose every operation fails, like a full or blocked localStorage."""

    def get_item(self, key):
        raise OSError("storage is blocked")

    def set_item(self, key, value):
        raise OSError("quota exceeded")

    def remove_item(self, key):
        raise OSError("storage is blocked")


def _make_store(**items):
    return SettingsStore(MemoryStorage(items))


@pytest.mark.parametrize("value", [420, 3.5, "wide", True, None, [1, 2], {"a": {"b": 1}}])
def test_set_then_get(value):
    store = _make_store()
    assert store.set("key", value) == PersistResult(ok=True)
    assert store.get("key", "fallback") == value


def test_absent_key_returns_fallback():
    assert _make_store().get("contextWidth", 350) == 350


def test_fallback_defaults_to_none():
    assert _make_store().get("missing") is None


def test_undecodable_value_returns_fallback():
    store = _make_store(**{f"{NAMESPACE}:contextWidth": "{not json"})
    assert store.get("contextWidth", 350) == 350


def test_keys_are_namespaced():
    storage = MemoryStorage()
    store = SettingsStore(storage, namespace="demo")
    store.set("outputHeight", 250)
    assert storage.get_item("demo:outputHeight") == "250"
    assert store.key_for("outputHeight") == "demo:outputHeight"


def test_default_namespace():
    assert SettingsStore(MemoryStorage()).key_for("x") == "template-playground:x"


def test_namespaces_do_not_collide():
    storage = MemoryStorage()
    SettingsStore(storage, namespace="one").set("k", 1)
    SettingsStore(storage, namespace="two").set("k", 2)
    assert SettingsStore(storage, namespace="one").get("k") == 1
    assert len(storage) == 2


def test_remove():
    store = _make_store()
    store.set("k", 1)
    assert store.remove("k").ok
    assert store.get("k", "gone") == "gone"


def test_unavailable_storage():
    store = SettingsStore(None)
    assert not store.available
    assert store.get("k", 7) == 7
    result = store.set("k", 1)
    assert not result.ok
    assert result.error == "storage unavailable"
    assert not store.remove("k").ok


def test_failing_storage_never_raises():
    store = SettingsStore(_BrokenStorage())
    assert store.get("k", "fallback") == "fallback"
    result = store.set("k", 1)
    assert result.ok is False
    assert "quota exceeded" in result.error
    assert store.remove("k").ok is False


def test_unserializable_value_reports_failure():
    result = _make_store().set("k", object())
    assert not result.ok


class TestJsonFileStorage:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "settings.json"
        SettingsStore.from_path(path).set("contextWidth", 420)
        assert SettingsStore.from_path(path).get("contextWidth", 350) == 420

    def test_file_contents(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        SettingsStore.from_path(path).set("outputHeight", 250)
        assert json.loads(path.read_text(encoding="utf-8")) == {
            "template-playground:outputHeight": "250"
        }

    def test_missing_file_reads_empty(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "absent.json")
        assert storage.get_item("k") is None

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileStorage(path).get_item("k")

    def test_non_object_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileStorage(path).get_item("k")

    def test_corrupt_file_falls_back_in_store(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")
        store = SettingsStore.from_path(path)
        assert store.get("contextWidth", 350) == 350
        assert not store.set("contextWidth", 400).ok

    def test_remove_item(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "settings.json")
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")
        assert storage.get_item("a") is None
        assert storage.get_item("b") == "2"
