"""Tests for ConfigStore and the KVManager it persists through."""

from __future__ import annotations

import pytest

from scrcpyhub.core.args_cls import SessionConfig
from scrcpyhub.core.config_store import ConfigStore
from scrcpyhub.utils import KVManager


@pytest.fixture
def store(kvm):
    return ConfigStore(kvm, default_record_path="/home/user/Videos")


class TestKVManager:
    def test_get_default(self, kvm):
        assert kvm.get("missing", 3) == 3

    def test_set_get_delete(self, kvm):
        kvm.set("k", {"a": [1, 2]})
        assert kvm.get("k") == {"a": [1, 2]}
        kvm.delete("k")
        assert kvm.get("k") is None

    def test_separate_tables(self, tmp_path):
        a = KVManager("a", db_path=tmp_path / "shared.db")
        b = KVManager("b", db_path=tmp_path / "shared.db")
        a.set("k", 1)
        assert b.get("k") is None


class TestConfigStore:
    def test_no_write_before_hydrate(self, kvm, store):
        store.update(bitrate=16)
        store.set_theme("dark")
        assert kvm.get(ConfigStore.KEY_CONFIG) is None
        assert kvm.get(ConfigStore.KEY_THEME) is None

    def test_hydrate_does_not_overwrite_saved_state(self, kvm, store):
        kvm.set(ConfigStore.KEY_CONFIG, {"bitrate": 24, "session_mode": "camera"})
        config = store.hydrate()
        assert config.bitrate == 24
        assert config.session_mode == "camera"
        assert kvm.get(ConfigStore.KEY_CONFIG)["bitrate"] == 24

    def test_old_blob_gets_new_field_defaults(self, kvm, store):
        kvm.set(ConfigStore.KEY_CONFIG, {"device": "abc", "fps": 30, "removed_field": 1})
        config = store.hydrate()
        assert config.device == "abc"
        assert config.fps == 30
        assert config.vd_width == 1920
        assert config.aspect_ratio_lock is True

    def test_record_path_default_filled(self, store):
        assert store.hydrate().record_path == "/home/user/Videos"

    def test_saved_record_path_kept(self, kvm, store):
        kvm.set(ConfigStore.KEY_CONFIG, {"record_path": "/data/rec"})
        assert store.hydrate().record_path == "/data/rec"

    def test_invalid_mode_resets_only_that_field(self, kvm, store):
        kvm.set(ConfigStore.KEY_CONFIG, {
            "session_mode": "hologram", "bitrate": 24, "device": "abc", "record_path": "/data/rec",
        })
        config = store.hydrate()
        assert config.session_mode == SessionConfig.MODE_MIRROR
        assert config.bitrate == 24
        assert config.device == "abc"
        assert config.record_path == "/data/rec"

        saved = kvm.get(ConfigStore.KEY_CONFIG)
        assert saved["session_mode"] == SessionConfig.MODE_MIRROR
        assert saved["bitrate"] == 24
        assert saved["device"] == "abc"
        assert saved["record_path"] == "/data/rec"

    def test_update_persists_after_hydrate(self, kvm, store):
        store.hydrate()
        store.update(bitrate=16, fps=30)
        saved = kvm.get(ConfigStore.KEY_CONFIG)
        assert saved["bitrate"] == 16
        assert saved["fps"] == 30

    def test_update_unknown_field(self, store):
        with pytest.raises(ValueError):
            store.update(colour="red")

    def test_sync_device(self, kvm, store):
        store.hydrate()
        store.sync_device("R58M123ABC")
        assert store.config.device == "R58M123ABC"
        assert kvm.get(ConfigStore.KEY_CONFIG)["device"] == "R58M123ABC"

    def test_preferences(self, kvm, store):
        store.hydrate()
        store.set_theme("dark")
        store.set_auto_connect(False)

        other = ConfigStore(kvm)
        other.hydrate()
        assert other.theme == "dark"
        assert other.auto_connect is False
