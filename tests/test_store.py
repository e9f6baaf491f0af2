"""Tests for the filesystem store helpers."""

import os
import stat
from unittest.mock import patch

import pytest

from hub.errors import PersistenceError
from hub.plugins.store import (
    PluginTransaction,
    StoreWriteError,
    WriteStage,
    atomic_write_text,
)


class TestAtomicWriteText:

    def test_writes_and_replaces(self, tmp_path):
        target = tmp_path / "meta.json"
        atomic_write_text(target, "one")
        atomic_write_text(target, "two")
        assert target.read_text(encoding="utf-8") == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["meta.json"]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_written_file_is_world_readable(self, tmp_path):
        target = tmp_path / "script.js"
        atomic_write_text(target, "x")
        assert stat.S_IMODE(target.stat().st_mode) == 0o644

    def test_missing_parent_is_create_stage(self, tmp_path):
        with pytest.raises(StoreWriteError) as exc:
            atomic_write_text(tmp_path / "nope" / "meta.json", "x")
        assert exc.value.stage == WriteStage.CREATE

    def test_failed_rename_keeps_old_content_and_cleans_temp(self, tmp_path):
        target = tmp_path / "style.css"
        target.write_text("old", encoding="utf-8")

        with patch("hub.plugins.store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StoreWriteError) as exc:
                atomic_write_text(target, "new")

        assert exc.value.stage == WriteStage.WRITE
        assert target.read_text(encoding="utf-8") == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["style.css"]


class TestPluginTransaction:
    """Tests for the create-directory transaction."""

    def test_commit_keeps_directory(self, tmp_path):
        plugin_dir = tmp_path / "plugins" / "foo"
        with PluginTransaction(plugin_dir) as tx:
            tx.write("meta.json", "{}")
            tx.commit()
        assert (plugin_dir / "meta.json").exists()

    def test_exception_rolls_back(self, tmp_path):
        plugin_dir = tmp_path / "plugins" / "foo"
        with pytest.raises(RuntimeError):
            with PluginTransaction(plugin_dir) as tx:
                tx.write("meta.json", "{}")
                raise RuntimeError("boom")
        assert not plugin_dir.exists()

    def test_missing_commit_rolls_back(self, tmp_path):
        plugin_dir = tmp_path / "plugins" / "foo"
        with PluginTransaction(plugin_dir) as tx:
            tx.write("meta.json", "{}")
        assert not plugin_dir.exists()

    def test_existing_directory_is_rejected(self, tmp_path):
        plugin_dir = tmp_path / "foo"
        plugin_dir.mkdir()
        with pytest.raises(PersistenceError) as exc:
            with PluginTransaction(plugin_dir):
                pass
        assert str(exc.value) == "Failed to create plugin directory."
        # a directory the transaction did not create is left alone
        assert plugin_dir.exists()

    def test_failed_rollback_is_not_fatal(self, tmp_path):
        plugin_dir = tmp_path / "foo"
        with patch("hub.plugins.store.remove_tree", side_effect=OSError("busy")):
            with pytest.raises(ValueError):
                with PluginTransaction(plugin_dir):
                    raise ValueError("original failure")
