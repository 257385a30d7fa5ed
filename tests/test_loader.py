import pytest

from Errors import ParseError
from Loader import (bytes_to_words, load_assembly_file, load_binary_file, load_machine_code_text,
                    save_assembly_file, save_binary_file, save_machine_code_text, words_to_bytes)


def test_words_are_little_endian():
    assert words_to_bytes([0x2008000A]) == bytes([0x0A, 0x00, 0x08, 0x20])
    assert bytes_to_words(bytes([0xEF, 0xBE, 0xAD, 0xDE])) == [0xDEADBEEF]


def test_bytes_to_words_needs_whole_words():
    with pytest.raises(ValueError):
        bytes_to_words(b"\x00\x01\x02")


def test_assembly_file(tmp_path):
    path = tmp_path / "prog.asm"
    save_assembly_file(str(path), "addi $t0, $zero, 1  # µ\n")
    assert load_assembly_file(str(path)) == "addi $t0, $zero, 1  # µ\n"


def test_binary_file(tmp_path):
    path = tmp_path / "prog.bin"
    save_binary_file(str(path), [1, 0xFFFFFFFF])
    assert load_binary_file(str(path)) == b"\x01\x00\x00\x00\xff\xff\xff\xff"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_assembly_file(str(tmp_path / "missing.asm"))
    with pytest.raises(FileNotFoundError):
        load_binary_file(str(tmp_path / "missing.bin"))


def test_machine_code_text(tmp_path):
    path = tmp_path / "prog.txt"
    path.write_text(
        "# sum\n"
        "0x2008000A\n"
        "\n"
        "00100000000010010000000000010100  # addi $t1, $zero, 20\n",
        encoding="utf-8",
    )
    assert load_machine_code_text(str(path)) == [0x2008000A, 0x20090014]


def test_machine_code_text_round_trip_binary(tmp_path):
    path = tmp_path / "prog.txt"
    save_machine_code_text(str(path), [0x01095020], binary=True)
    assert path.read_text(encoding="utf-8") == "00000001000010010101000000100000\n"
    assert load_machine_code_text(str(path)) == [0x01095020]


@pytest.mark.parametrize("line", ["0x1FFFFFFFF", "1010", "hello"])
def test_machine_code_text_errors(tmp_path, line):
    path = tmp_path / "bad.txt"
    path.write_text("0x00000000\n" + line + "\n", encoding="utf-8")
    with pytest.raises(ParseError) as info:
        load_machine_code_text(str(path))
    assert info.value.line_number == 2
