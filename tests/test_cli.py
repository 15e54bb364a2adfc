"""Tests for the command line interface."""

import json
import logging
import os
import sys

import pytest

from crcgen import cli


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    monkeypatch.delenv('CRCGEN_DEBUG', raising=False)
    yield
    logger = logging.getLogger('crcgen')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def data_dir(tmp_path):
    root = tmp_path / 'data'
    (root / 'sub').mkdir(parents=True)
    (root / 'hello.txt').write_bytes(b'hello')
    (root / 'sub' / 'empty').write_bytes(b'')
    return root


def test_crc32_writes_manifest(data_dir, tmp_path):
    output = tmp_path / 'manifest.json'
    assert cli.main(['crc32', str(data_dir), '--output', str(output), '--no-progress']) == 0

    manifest = json.loads(output.read_text())
    assert manifest['Path'] == str(data_dir)
    assert manifest['Files'][0]['Checksums'] == {'CRC32': '3610a686'}
    assert manifest['Files'][0]['Size'] == 5
    assert manifest['Dirs'][0]['Files'][0]['Checksums'] == {'CRC32': '00000000'}
    assert manifest['LastMod'] >= manifest['Files'][0]['LastMod']


def test_crc32_yaml_atomic(data_dir, tmp_path):
    output = tmp_path / 'manifest.yml'
    assert cli.main(['crc32', str(data_dir), '--output', str(output), '--no-progress', '--atomic']) == 0
    assert output.read_text().startswith(f'Path: {data_dir}\n')


def test_crc32_invalid_output(data_dir, tmp_path):
    assert cli.main(['crc32', str(data_dir), '--output', str(tmp_path / 'manifest.txt')]) == cli.EXIT_STARTUP_FAILED


def test_crc32_missing_directory(tmp_path):
    output = tmp_path / 'manifest.json'
    args = ['crc32', str(tmp_path / 'missing'), '--output', str(output), '--no-progress']
    assert cli.main(args) == cli.EXIT_RUN_FAILED


def test_show(data_dir, tmp_path, capsys):
    output = tmp_path / 'manifest.json'
    cli.main(['crc32', str(data_dir), '--output', str(output), '--no-progress'])
    capsys.readouterr()

    assert cli.main(['show', str(output)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith('data/ (last modified ')
    assert lines[1].startswith('  hello.txt 5 ')
    assert lines[1].endswith('CRC32=3610a686')
    assert lines[2].startswith('  sub/')
    assert lines[3].startswith('    empty 0 ')


def test_show_malformed(tmp_path):
    output = tmp_path / 'manifest.json'
    output.write_text('{')
    assert cli.main(['show', str(output)]) == cli.EXIT_STARTUP_FAILED


def test_config_file(data_dir, tmp_path):
    (data_dir / '.secret').write_bytes(b'x')
    config = tmp_path / 'crcgen.yaml'
    config.write_text('show_hidden: false\nprogress: false\n')
    output = tmp_path / 'manifest.json'
    assert cli.main(['--config', str(config), 'crc32', str(data_dir), '--output', str(output)]) == 0
    names = [file['Path'] for file in json.loads(output.read_text())['Files']]
    assert names == [str(data_dir / 'hello.txt')]


def test_version(capsys):
    with pytest.raises(SystemExit) as info:
        cli.main(['--version'])
    assert info.value.code == 0
    assert capsys.readouterr().out.startswith('crcgen v')


def test_manifest_inside_scanned_directory(data_dir):
    output = data_dir / 'manifest.json'
    assert cli.main(['crc32', str(data_dir), '--output', str(output), '--no-progress']) == 0
    names = [file['Path'] for file in json.loads(output.read_text())['Files']]
    assert names == [str(data_dir / 'hello.txt')]


@pytest.mark.skipif(os.name == 'nt' or sys.platform == 'darwin', reason='file names must be arbitrary bytes')
def test_crc32_undecodable_file_name(data_dir, tmp_path):
    with open(os.path.join(os.fsencode(str(data_dir)), b'bad\xff.txt'), 'wb') as f:
        f.write(b'hello')
    output = tmp_path / 'manifest.json'
    assert cli.main(['crc32', str(data_dir), '--output', str(output), '--no-progress']) == 0
    assert b'bad\xff.txt' in output.read_bytes()


def test_missing_config_file(data_dir, tmp_path):
    args = ['--config', str(tmp_path / 'missing.yaml'), 'crc32', str(data_dir), '--output', str(tmp_path / 'm.json')]
    assert cli.main(args) == cli.EXIT_STARTUP_FAILED


@pytest.mark.parametrize('content', ['colour: blue\n', 'chunk_size: [1\n', 'chunk_size: 0\n'])
def test_invalid_config_file(data_dir, tmp_path, content):
    config = tmp_path / 'crcgen.yaml'
    config.write_text(content)
    args = ['--config', str(config), 'crc32', str(data_dir), '--output', str(tmp_path / 'm.json')]
    assert cli.main(args) == cli.EXIT_STARTUP_FAILED
    assert not (tmp_path / 'm.json').exists()
