"""Tests for the config backup store."""

import os
import re

import pytest

from quickchange.core.backups import BackupStore, bare_name, sanitize_label
from quickchange.core.exceptions import (
    BackupNotFoundError,
    ConfigNotFoundError,
    ConfigParseError,
    InvalidBackupNameError,
)
from quickchange.core.paths import BACKUP_DIR_NAME


@pytest.fixture
def store(sample_config):
    """Backup store for the sample config."""
    return BackupStore(sample_config)


def _set_mtime(path, seconds):
    os.utime(path, (seconds, seconds))


class TestSanitizeLabel:
    """Tests for sanitize_label."""

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("My Backup: v1.0!", "My-Backup-v1.0!"),
            ("a/b\\c", "a-b-c"),
            ("  padded  ", "padded"),
            ('x<>:"|?*y', "x-y"),
            ("镜像 备份", "镜像-备份"),
            ("tab\there", "tabhere"),
            ("///", "custom"),
            ("", "custom"),
        ],
    )
    def test_sanitize(self, label, expected):
        """Reserved characters and whitespace become single dashes."""
        assert sanitize_label(label) == expected


class TestBareName:
    """Tests for bare_name."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("auto-1.toml", "auto-1.toml"),
            ("../../etc/passwd", "passwd"),
            ("..\\..\\evil.toml", "evil.toml"),
            ("/abs/path/x.toml", "x.toml"),
        ],
    )
    def test_strips_directories(self, name, expected):
        """Only the final component is kept."""
        assert bare_name(name) == expected

    @pytest.mark.parametrize("name", ["", "  ", ".", "..", "a/..", "\\"])
    def test_rejects_unusable(self, name):
        """Names without a usable final component are rejected."""
        with pytest.raises(InvalidBackupNameError):
            bare_name(name)


class TestCreate:
    """Tests for BackupStore.create."""

    def test_auto_name(self, store, sample_config):
        """Unlabelled backups are auto-<millis>.toml copies."""
        entry = store.create()
        assert re.fullmatch(r"auto-\d+\.toml", entry.name)
        assert entry.size == sample_config.stat().st_size
        assert (store.backup_dir / entry.name).read_bytes() == sample_config.read_bytes()

    def test_labelled_name(self, store):
        """Labelled backups embed the sanitized label."""
        entry = store.create("before switch")
        assert re.fullmatch(r"manual-before-switch-\d+\.toml", entry.name)

    def test_blank_label_is_auto(self, store):
        """A whitespace label counts as no label."""
        assert store.create("   ").name.startswith("auto-")

    def test_backup_dir_beside_config(self, store, sample_config):
        """Snapshots go to quickchange-backups next to the config."""
        entry = store.create()
        assert store.backup_dir == sample_config.parent / BACKUP_DIR_NAME
        assert os.path.dirname(entry.path) == str(store.backup_dir)

    def test_same_millisecond_does_not_overwrite(self, store, monkeypatch):
        """Two backups in the same millisecond get distinct names."""
        monkeypatch.setattr("quickchange.core.backups.now_millis", lambda: 1_700_000_000_000)
        first = store.create()
        second = store.create()
        assert first.name != second.name
        assert len(store.list()) == 2

    def test_missing_config(self, config_path):
        """Backing up a missing config fails."""
        with pytest.raises(ConfigNotFoundError):
            BackupStore(config_path).create()


class TestList:
    """Tests for BackupStore.list."""

    def test_no_directory(self, store):
        """A missing backup directory lists nothing."""
        assert store.list() == []

    def test_newest_first(self, store):
        """Entries are ordered by modification time, newest first."""
        entries = [store.create(label) for label in ("first", "second", "third")]
        for offset, entry in enumerate(entries):
            _set_mtime(store.backup_dir / entry.name, 1_000_000 + offset * 60)

        listed = store.list()

        assert [e.name for e in listed] == [e.name for e in reversed(entries)]
        assert listed[0].modified == 1_000_120

    def test_same_second_uses_sub_second_time(self, store):
        """Backups made within one second still list newest first."""
        manual = store.create("first")
        auto = store.create()
        base_ns = 1_700_000_000 * 1_000_000_000
        os.utime(store.backup_dir / manual.name, ns=(base_ns + 100_000_000,) * 2)
        os.utime(store.backup_dir / auto.name, ns=(base_ns + 600_000_000,) * 2)

        listed = store.list()

        assert [e.name for e in listed] == [auto.name, manual.name]
        assert listed[0].modified == listed[1].modified == 1_700_000_000

    def test_ignores_other_files(self, store):
        """Non-toml files and subdirectories are skipped."""
        store.create()
        (store.backup_dir / "notes.txt").write_text("x", encoding="utf-8")
        (store.backup_dir / "nested.toml").mkdir()
        assert len(store.list()) == 1


class TestRestore:
    """Tests for BackupStore.restore."""

    def test_restores_exact_bytes(self, store, sample_config):
        """The live file gets the snapshot bytes, comments included."""
        entry = store.create()
        snapshot = sample_config.read_bytes()
        sample_config.write_text("[net]\noffline = true\n", encoding="utf-8")

        store.restore(entry.name)

        assert sample_config.read_bytes() == snapshot

    def test_corrupt_snapshot_leaves_config(self, store, sample_config):
        """An invalid snapshot is refused and the live file is untouched."""
        store.backup_dir.mkdir(parents=True)
        (store.backup_dir / "bad.toml").write_text("[net\n", encoding="utf-8")
        before = sample_config.read_bytes()

        with pytest.raises(ConfigParseError):
            store.restore("bad.toml")

        assert sample_config.read_bytes() == before

    def test_missing_snapshot(self, store):
        """Unknown names raise BackupNotFoundError."""
        with pytest.raises(BackupNotFoundError, match="Backup not found: nope.toml"):
            store.restore("nope.toml")

    def test_traversal_stays_in_backup_dir(self, store, tmp_path):
        """A path-like name cannot reach files outside the backup directory."""
        outside = tmp_path / "outside.toml"
        outside.write_text("[net]\noffline = true\n", encoding="utf-8")
        with pytest.raises(BackupNotFoundError):
            store.restore("../../outside.toml")


class TestDeleteClearRename:
    """Tests for delete, clear and rename."""

    def test_delete(self, store):
        """Deleted snapshots disappear from the listing."""
        entry = store.create()
        store.delete(entry.name)
        assert store.list() == []

    def test_delete_missing(self, store):
        """Deleting an unknown snapshot fails."""
        with pytest.raises(BackupNotFoundError):
            store.delete("ghost.toml")

    def test_delete_traversal_does_not_escape(self, store, sample_config):
        """Deleting ../config.toml never touches the live config."""
        store.create()
        with pytest.raises(BackupNotFoundError):
            store.delete("../config.toml")
        assert sample_config.exists()

    def test_clear(self, store, sample_config):
        """Clear removes every snapshot and reports the count."""
        store.create("a")
        store.create("b")
        assert store.clear() == 2
        assert store.list() == []
        assert sample_config.exists()

    def test_clear_without_directory(self, store):
        """Clearing with no backup directory removes nothing."""
        assert store.clear() == 0

    def test_rename_appends_suffix(self, store):
        """The .toml suffix is added when missing."""
        entry = store.create()
        renamed = store.rename(entry.name, "golden")
        assert renamed.name == "golden.toml"
        assert [e.name for e in store.list()] == ["golden.toml"]

    def test_rename_keeps_suffix(self, store):
        """An existing .toml suffix is not doubled."""
        entry = store.create()
        assert store.rename(entry.name, "golden.toml").name == "golden.toml"

    def test_rename_onto_existing(self, store):
        """Renaming onto an existing snapshot is refused."""
        first = store.create("a")
        second = store.create("b")
        with pytest.raises(InvalidBackupNameError, match="already exists"):
            store.rename(first.name, second.name)

    def test_rename_strips_directories(self, store):
        """The new name is reduced to a bare file name."""
        entry = store.create()
        renamed = store.rename(entry.name, "../../escaped")
        assert renamed.name == "escaped.toml"
        assert (store.backup_dir / "escaped.toml").is_file()
