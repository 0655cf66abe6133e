import pathlib

import pytest

from secureguard.errors import PersistenceError
from secureguard.storage import (
    API_KEY_KEY,
    KeyValueStore,
    StoreConfig,
    get_api_key,
    remove_api_key,
    save_api_key,
)


def _store(tmp_path) -> KeyValueStore:
    return KeyValueStore(StoreConfig(directory=str(tmp_path / "sg_store")))


def test_missing_key_is_distinct_from_empty_value(tmp_path):
    with _store(tmp_path) as store:
        assert store.get("nothing") is None
        assert not store.contains("nothing")

        store.set("empty", "")
        assert store.get("empty") == ""
        assert store.contains("empty")


def test_delete(tmp_path):
    with _store(tmp_path) as store:
        store.set("k", "v")
        store.delete("k")
        assert store.get("k") is None
        # deleting a missing key is not an error
        store.delete("k")


def test_values_survive_reopen(tmp_path):
    with _store(tmp_path) as store:
        store.set("k", "v")
    with _store(tmp_path) as store:
        assert store.get("k") == "v"


def test_api_key_round_trip(tmp_path):
    with _store(tmp_path) as store:
        assert get_api_key(store) is None
        save_api_key(store, "  AIza-test  ")
        assert get_api_key(store) == "AIza-test"
        remove_api_key(store)
        assert get_api_key(store) is None
        assert not store.contains(API_KEY_KEY)


@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_api_key_is_refused(tmp_path, blank):
    with _store(tmp_path) as store:
        with pytest.raises(ValueError):
            save_api_key(store, blank)
        assert get_api_key(store) is None


def test_os_default_directory_uses_platformdirs(tmp_path, monkeypatch):
    from secureguard import storage as storage_mod

    target_dir = tmp_path / "os_default_here"

    def fake_user_data_dir(app_name: str, appauthor: bool = False):
        return str(target_dir)

    monkeypatch.setattr(storage_mod, "_user_data_dir", fake_user_data_dir, raising=True)

    with KeyValueStore(StoreConfig(directory="os-default"), app_name="sg_test") as store:
        store.set("k", "v")
        assert pathlib.Path(store.directory) == target_dir


def test_unusable_directory_raises_persistence_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied")
    store = KeyValueStore(StoreConfig(directory=str(blocker)))
    with pytest.raises(PersistenceError):
        store.set("k", "v")
    with pytest.raises(PersistenceError):
        store.get("k")


def test_store_config_from_config_prefers_explicit_directory():
    cfg = {"store": {"directory": "/from/config"}}
    assert StoreConfig.from_config(cfg).directory == "/from/config"
    assert StoreConfig.from_config(cfg, "/explicit").directory == "/explicit"
    assert StoreConfig.from_config({}).directory == "os-default"
