"""Tests for the directory scanner."""

import os

import pytest

from crcgen.walker import scan_directory


@pytest.fixture
def root(tmp_path):
    (tmp_path / 'b.txt').write_bytes(b'hello')
    (tmp_path / 'a.txt').write_bytes(b'')
    (tmp_path / 'sub').mkdir()
    (tmp_path / 'sub' / 'c.bin').write_bytes(b'12345678')
    (tmp_path / '.hidden').mkdir()
    (tmp_path / '.hidden' / 'd.txt').write_bytes(b'x')
    (tmp_path / '.dotfile').write_bytes(b'y')
    os.utime(tmp_path / 'b.txt', (1600000000, 1600000000))
    return tmp_path


def test_scan_directory(root):
    entries = {os.path.relpath(entry.path, root): entry for entry in scan_directory(str(root))}
    assert set(entries) == {'b.txt', 'a.txt', 'sub', os.path.join('sub', 'c.bin'),
                            '.hidden', os.path.join('.hidden', 'd.txt'), '.dotfile'}
    assert entries['sub'].type == 'dir'
    assert entries['sub'].size is None
    assert entries['b.txt'].type == 'file'
    assert entries['b.txt'].size == 5
    assert entries['b.txt'].last_modified == 1600000000
    assert entries[os.path.join('sub', 'c.bin')].name == 'c.bin'


def test_scan_directory_skips_hidden(root):
    names = {entry.name for entry in scan_directory(str(root), show_hidden=False)}
    assert names == {'a.txt', 'b.txt', 'sub', 'c.bin'}


def test_scan_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        scan_directory(str(tmp_path / 'missing'))


def test_scan_file(tmp_path):
    path = tmp_path / 'file.txt'
    path.write_bytes(b'')
    with pytest.raises(NotADirectoryError):
        scan_directory(str(path))
