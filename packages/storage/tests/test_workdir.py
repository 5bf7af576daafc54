"""Tests for WorkDirectoryManager."""

import shutil

import pytest
from asset_compute_storage.workdir import WorkDirectoryManager


def test_allocates_distinct_directories_under_base(tmp_path):
    workdir = WorkDirectoryManager(tmp_path)

    source_dir = workdir.allocate("in")
    out_dir = workdir.allocate("out")

    assert source_dir != out_dir
    assert source_dir.parent == workdir.base == out_dir.parent
    assert workdir.base.parent == tmp_path
    assert source_dir.name.startswith("in-")
    assert out_dir.name.startswith("out-")
    assert list(source_dir.iterdir()) == []
    assert workdir.allocated == (source_dir, out_dir)


def test_same_kind_twice_gives_new_directory(tmp_path):
    workdir = WorkDirectoryManager(tmp_path)
    assert workdir.allocate("out") != workdir.allocate("out")


def test_creates_missing_root(tmp_path):
    root = tmp_path / "not" / "yet"
    workdir = WorkDirectoryManager(root)
    workdir.allocate("in")
    assert root.is_dir()


def test_release_removes_everything(tmp_path):
    workdir = WorkDirectoryManager(tmp_path)
    out_dir = workdir.allocate("out")
    (out_dir / "rendition0.png").write_bytes(b"png")
    (out_dir / "nested").mkdir()

    workdir.release_all()

    assert list(tmp_path.iterdir()) == []
    assert workdir.released


def test_release_is_idempotent(tmp_path):
    workdir = WorkDirectoryManager(tmp_path)
    workdir.allocate("in")
    workdir.release_all()
    workdir.release_all()
    assert list(tmp_path.iterdir()) == []


def test_release_without_allocations_creates_nothing(tmp_path):
    workdir = WorkDirectoryManager(tmp_path / "root")
    workdir.release_all()
    assert not (tmp_path / "root").exists()


def test_allocate_after_release_fails(tmp_path):
    workdir = WorkDirectoryManager(tmp_path)
    workdir.release_all()
    with pytest.raises(RuntimeError):
        workdir.allocate("in")


def test_context_manager_releases_on_error(tmp_path):
    with pytest.raises(ValueError):
        with WorkDirectoryManager(tmp_path) as workdir:
            workdir.allocate("in")
            raise ValueError("callback exploded")
    assert list(tmp_path.iterdir()) == []


def test_directory_removed_externally_is_ignored(tmp_path):
    workdir = WorkDirectoryManager(tmp_path)
    source_dir = workdir.allocate("in")
    shutil.rmtree(source_dir)
    workdir.release_all()
    assert list(tmp_path.iterdir()) == []


def test_removal_errors_are_logged_not_raised(tmp_path, monkeypatch, caplog):
    workdir = WorkDirectoryManager(tmp_path)
    workdir.allocate("in")

    def broken_rmtree(path):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(shutil, "rmtree", broken_rmtree)
    with caplog.at_level("WARNING", logger="asset_compute_storage.workdir"):
        workdir.release_all()

    assert "Failed to remove work directory" in caplog.text
    assert workdir.released
