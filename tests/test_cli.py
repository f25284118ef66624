from __future__ import annotations

from pathlib import Path

import pytest

from generic_crc import _main, create_engine

CHECK_DATA = b"123456789"
CASTAGNOLI_CODEWORD = ("000102030405060708090A0B0C0D0E0F"
                       "101112131415161718191A1B1C1D1E1F4E79DD46")


def _run(argv) -> int:
    with pytest.raises(SystemExit) as exc:
        _main(argv)
    return exc.value.code


@pytest.fixture
def check_file(tmp_path: Path) -> Path:
    p = tmp_path / "check.bin"
    p.write_bytes(CHECK_DATA)
    return p


def test_crc_of_file(check_file, capsys):
    assert _run(["-qc", "CRC-32", str(check_file)]) == 0
    assert capsys.readouterr().out == "0xcbf43926\n"


@pytest.mark.parametrize("fmt,expected", [("hex", "29b1"), ("decimal", str(0x29B1)), ("0xhex", "0x29b1")])
def test_output_formats(check_file, capsys, fmt, expected):
    assert _run(["-q", "-c", "CRC-16/CCITT-FALSE", "-f", fmt, str(check_file)]) == 0
    assert capsys.readouterr().out.strip() == expected


def test_verbose_output(check_file, capsys):
    assert _run(["-c", "crc-8", str(check_file)]) == 0
    out = capsys.readouterr().out
    assert "number of bytes processed: 9" in out
    assert "crc: 0xf4" in out


def test_custom_params(check_file, capsys):
    assert _run(["-q", "-c", "custom: width=16 poly=0x1021 init=0xffff", str(check_file)]) == 0
    assert capsys.readouterr().out == "0x29b1\n"


def test_custom_params_with_unsupported_width(check_file, capsys):
    assert _run(["-q", "-c", "custom: width=12 poly=0x80f", str(check_file)]) == 1
    assert "unsupported CRC width" in capsys.readouterr().err


def test_invalid_custom_params(check_file, capsys):
    assert _run(["-q", "-c", "custom: width=16", str(check_file)]) == 1
    assert 'invalid "CUSTOM:" CRC parameters' in capsys.readouterr().err


def test_unknown_crc_name(check_file, capsys):
    assert _run(["-c", "CRC-99/NOPE", str(check_file)]) == 1
    assert "invalid CRC algorithm name" in capsys.readouterr().err


def test_hex_input(tmp_path, capsys):
    p = tmp_path / "check.hex"
    p.write_bytes(b"31 32 33\n3435363738 39\n")
    assert _run(["-qc", "CRC-32", "-i", "hex", str(p)]) == 0
    assert capsys.readouterr().out == "0xcbf43926\n"


def test_hex_input_with_odd_nibble(tmp_path, capsys):
    p = tmp_path / "odd.hex"
    p.write_bytes(b"3132 3")
    assert _run(["-qc", "CRC-32", "-i", "hex", str(p)]) == 1
    assert "unconsumed nibble" in capsys.readouterr().err


def test_hex_input_with_invalid_character(tmp_path, capsys):
    p = tmp_path / "bad.hex"
    p.write_bytes(b"31zz")
    assert _run(["-qc", "CRC-32", "-i", "hex", str(p)]) == 1
    assert "invalid input character" in capsys.readouterr().err


def test_residue_of_codeword(tmp_path, capsys):
    p = tmp_path / "codeword.hex"
    p.write_text(CASTAGNOLI_CODEWORD)
    assert _run(["-qc", "CRC-32/CASTAGNOLI", "-i", "hex", "--residue", str(p)]) == 0
    assert capsys.readouterr().out == "0xb798b438\n"


def test_residue_const(capsys):
    assert _run(["-qc", "CRC-32/CASTAGNOLI", "--residue-const"]) == 0
    assert capsys.readouterr().out == "0xb798b438\n"


def test_interim_remainder_and_continue(tmp_path, capsys):
    first = tmp_path / "first.bin"
    first.write_bytes(b"1234")
    second = tmp_path / "second.bin"
    second.write_bytes(b"56789")

    assert _run(["-qc", "CRC-32", "-r", str(first)]) == 0
    interim = capsys.readouterr().out.strip()
    assert _run(["-qc", "CRC-32", "-k", interim, str(second)]) == 0
    assert capsys.readouterr().out == "0xcbf43926\n"


def test_max_input_bytes(check_file, capsys):
    assert _run(["-qc", "CRC-32", "-m", "4", "-f", "decimal", str(check_file)]) == 0
    assert int(capsys.readouterr().out) == create_engine("CRC-32").checksum(b"1234")


def test_conflicting_outputs(check_file, capsys):
    assert _run(["-qc", "CRC-32", "-r", "--residue", str(check_file)]) == 1
    assert "at most one" in capsys.readouterr().err


def test_list(capsys):
    assert _run(["--list"]) == 0
    assert "Number of failed CRC algorithms: 0" in capsys.readouterr().out


def test_no_arguments_prints_help(capsys):
    assert _run([]) == 2
    assert "usage" in capsys.readouterr().out
