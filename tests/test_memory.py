import pytest

from Errors import AddressOutOfRange
from Memory import Memory, SparseMemory, make_memory


@pytest.fixture(params=["fixed", "sparse"])
def memory(request):
    return make_memory(request.param, 4096)


def test_word_is_little_endian(memory):
    memory.write_word(0x10, 0xDEADBEEF)
    assert memory.read_byte(0x10) == 0xEF
    assert memory.read_byte(0x11) == 0xBE
    assert memory.read_byte(0x12) == 0xAD
    assert memory.read_byte(0x13) == 0xDE
    assert memory.read_half_word(0x10) == 0xBEEF
    assert memory.read_word(0x10) == 0xDEADBEEF


def test_unwritten_memory_reads_zero(memory):
    assert memory.read_word(0x200) == 0


def test_writes_are_truncated_to_width(memory):
    memory.write_byte(0, 0x1FF)
    memory.write_half_word(4, 0x12345)
    assert memory.read_byte(0) == 0xFF
    assert memory.read_half_word(4) == 0x2345


def test_load_program_and_clear(memory):
    memory.load_program(bytes([1, 2, 3, 4]), 8)
    assert memory.read_word(8) == 0x04030201
    memory.clear()
    assert memory.read_word(8) == 0


def test_fixed_memory_rejects_out_of_range():
    memory = Memory(64)
    with pytest.raises(AddressOutOfRange):
        memory.read_word(62)
    with pytest.raises(AddressOutOfRange):
        memory.write_byte(64, 1)
    with pytest.raises(AddressOutOfRange):
        memory.read_byte(-1)
    memory.write_word(60, 7)
    assert memory.read_word(60) == 7


def test_fixed_memory_dump_is_clipped():
    memory = Memory(16)
    assert len(memory.dump(0, 1024)) == 16
    assert memory.dump(32, 4) == b""


def test_sparse_memory_accepts_any_address():
    memory = SparseMemory()
    memory.write_word(0x7FFF0000, 42)
    assert memory.read_word(0x7FFF0000) == 42
    assert len(memory.dump(0, 1024)) == 1024


def test_unknown_kind():
    with pytest.raises(ValueError):
        make_memory("flash")


def test_check_range():
    memory = Memory(64)
    memory.check_range(0, 64)
    with pytest.raises(AddressOutOfRange):
        memory.check_range(60, 8)
    SparseMemory().check_range(0xFFFFFFF0, 1024)
