"""Test FileSystemAdapter."""

import pytest

from kiln.adapters.file_adapter import create_file_adapter
from kiln.core.errors import KilnError


@pytest.fixture
def adapter():
    return create_file_adapter()


def test_write_creates_parents_and_keeps_newlines(adapter, tmp_path):
    path = tmp_path / "a" / "b" / "file.txt"

    adapter.write_text(path, "one\r\ntwo\n")

    assert path.read_bytes() == b"one\r\ntwo\n"
    assert adapter.read_text(path) == "one\r\ntwo\n"


def test_copy_file_creates_destination_dir(adapter, tmp_path):
    src = tmp_path / "src.bin"
    src.write_bytes(b"\xde\xad\xbe\xef")

    adapter.copy_file(src, tmp_path / "out" / "dst.bin")

    assert (tmp_path / "out" / "dst.bin").read_bytes() == b"\xde\xad\xbe\xef"


def test_read_missing_file_raises(adapter, tmp_path):
    with pytest.raises(KilnError, match="Cannot read"):
        adapter.read_text(tmp_path / "missing.txt")


def test_exists_and_mkdir(adapter, tmp_path):
    target = tmp_path / "x" / "y"
    assert not adapter.exists(target)

    adapter.mkdir(target)

    assert adapter.exists(target)
