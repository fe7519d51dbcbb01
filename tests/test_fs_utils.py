import os
import stat

import pytest

from localca.errors import StorageError
from localca.utils.fs import move_to_backup, read_file, write_file


def test_write_file_sets_mode_and_leaves_no_temp(tmp_path):
    target = write_file(tmp_path / "k.key", b"secret", 0o400, "key")
    assert target.read_bytes() == b"secret"
    assert stat.S_IMODE(os.stat(target).st_mode) == 0o400
    assert os.listdir(tmp_path) == ["k.key"]


def test_write_file_replaces_existing(tmp_path):
    write_file(tmp_path / "c.pem", b"one", 0o644, "certificate")
    write_file(tmp_path / "c.pem", b"two", 0o644, "certificate")
    assert (tmp_path / "c.pem").read_bytes() == b"two"


def test_missing_directory_is_storage_error(tmp_path):
    with pytest.raises(StorageError, match="certificate"):
        write_file(tmp_path / "nope" / "c.pem", b"x", 0o644, "certificate")
    with pytest.raises(StorageError):
        read_file(tmp_path / "missing.pem", "certificate")


def test_move_to_backup(tmp_path):
    assert move_to_backup(tmp_path / "absent", "-old.bak", "file") is None
    (tmp_path / "rootCA.pem").write_bytes(b"old")
    moved = move_to_backup(tmp_path / "rootCA.pem", "-old.bak", "CA certificate")
    assert moved == tmp_path / "rootCA.pem-old.bak"
    assert moved.read_bytes() == b"old"
    assert not (tmp_path / "rootCA.pem").exists()
