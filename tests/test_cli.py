import dataclasses

import pytest

from py_keccak_sponge.__main__ import main
from py_keccak_sponge.algorithms import SHA3_256, SHA3_512

ABC_SHA3_256 = '3a985da74fe225b2045c172d6bd390bd855f086e3e9d525b46bfe24511431532'


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv('KECCAK_ALGORITHM', raising=False)
    monkeypatch.delenv('KECCAK_ROUNDS', raising=False)


def test_string_input(capsys):
    assert main(['-s', 'abc']) == 0
    assert capsys.readouterr().out == f"{ABC_SHA3_256}  'abc'\n"


def test_hex_and_file_inputs(tmp_path, capsys):
    path = tmp_path/'msg.bin'
    path.write_bytes(b'abc')
    assert main(['-a', 'sha3-256', '-x', '0x616263', str(path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == [f'{ABC_SHA3_256}  0x616263', f'{ABC_SHA3_256}  {path}']


def test_xof_length(capsys):
    assert main(['-a', 'SHAKE128', '-n', '256', '-s', '']) == 0
    out = capsys.readouterr().out
    assert out.startswith('7f9c2ba4e88f827d616045507605853ed73b8093f6efbc88eb1a6eacfa66ef26')


def test_lanes_and_trace(tmp_path, capsys):
    trace = tmp_path/'out.trace'
    assert main(['-s', '', '--lanes', '--trace', str(trace)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 26
    assert lines[1].startswith('  A[0,0] = ')
    assert len(trace.read_text().splitlines()) == 1


def test_explicit_full_rounds(capsys):
    assert main(['--rounds', '24', '-s', 'abc']) == 0
    assert capsys.readouterr().out.startswith(ABC_SHA3_256)


def test_rounds_from_environment(monkeypatch, capsys):
    monkeypatch.setenv('KECCAK_ROUNDS', '1')
    assert main(['-s', 'abc']) == 0
    reduced = dataclasses.replace(SHA3_256, rounds=1).hexdigest(b'abc')
    assert reduced != ABC_SHA3_256
    assert capsys.readouterr().out == f"{reduced}  'abc'\n"
    assert main(['--rounds', '24', '-s', 'abc']) == 0
    assert capsys.readouterr().out.startswith(ABC_SHA3_256)


def test_algorithm_from_environment(monkeypatch, capsys):
    monkeypatch.setenv('KECCAK_ALGORITHM', 'sha3-512')
    assert main(['-s', 'abc']) == 0
    assert capsys.readouterr().out.startswith(SHA3_512.hexdigest(b'abc'))


@pytest.mark.parametrize('value', ['abc', '-1', '2.5'])
def test_bad_rounds_in_environment(value, monkeypatch, capsys):
    monkeypatch.setenv('KECCAK_ROUNDS', value)
    with pytest.raises(SystemExit) as e:
        main(['-s', 'abc'])
    assert e.value.code == 2
    assert 'KECCAK_ROUNDS' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    path = tmp_path/'missing.bin'
    with pytest.raises(SystemExit) as e:
        main([str(path)])
    assert e.value.code == 2
    assert f'Cannot read {path}' in capsys.readouterr().err


@pytest.mark.parametrize('argv', [
    ['-a', 'SHAKE128', '-s', 'abc'],
    ['-a', 'MD5', '-s', 'abc'],
    ['-a', 'SHA3-256', '-n', '128', '-s', 'abc'],
    ['-x', 'zz'],
    ['--rounds', '-1', '-s', 'abc'],
])
def test_errors(argv, capsys):
    with pytest.raises(SystemExit) as e:
        main(argv)
    assert e.value.code == 2
    assert 'error' in capsys.readouterr().err
