import json

import pytest

from servman.adapters.storage_local import MemoryUserNameStore, StorageLocal
from servman.viewmodels.settings_vm import SettingsVM


def test_user_settings_missing_file_and_save(tmp_path):
    storage = StorageLocal(root_dir=str(tmp_path))
    settings_path = tmp_path / "user_settings.json"

    assert storage.load_user_settings() is None
    assert not settings_path.exists()

    vm = SettingsVM(api_key="k")
    storage.save_user_settings(vm.to_dict())

    with settings_path.open("r", encoding="utf-8") as fh:
        persisted = json.load(fh)
    assert persisted == vm.to_dict()
    assert storage.load_user_settings() == vm.to_dict()


def test_user_name_round_trip_keeps_other_prefs(tmp_path):
    prefs_path = tmp_path / "user_prefs.json"
    prefs_path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
    storage = StorageLocal(root_dir=str(tmp_path))

    assert storage.load_user_name() is None
    storage.save_user_name("Jane")

    assert storage.load_user_name() == "Jane"
    assert json.loads(prefs_path.read_text(encoding="utf-8")) == {"theme": "dark", "user_name": "Jane"}


def test_non_object_json_is_rejected(tmp_path):
    (tmp_path / "user_prefs.json").write_text("[1, 2]", encoding="utf-8")
    storage = StorageLocal(root_dir=str(tmp_path))

    with pytest.raises(ValueError):
        storage.load_user_name()


def test_memory_store_records_saves():
    store = MemoryUserNameStore("initial")

    store.save_user_name("next")

    assert store.load_user_name() == "next"
    assert store.saved == ["next"]
