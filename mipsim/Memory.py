import logging

import numpy as np

from Errors import AddressOutOfRange

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_SIZE = 4096


class BaseMemory:
    """
    Byte-addressable memory. Subclasses only provide raw byte access; the
    little-endian word and half-word composition lives here so both variants
    agree bit for bit (byte 0 is least significant).
    """

    def read_bytes(self, address: int, width: int) -> bytes:
        raise NotImplementedError

    def write_bytes(self, address: int, data: bytes):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError

    def check_range(self, address: int, width: int):
        """Raise AddressOutOfRange if ``width`` bytes at ``address`` do not fit."""

    def read_byte(self, address: int) -> int:
        return self.read_bytes(address, 1)[0]

    def read_half_word(self, address: int) -> int:
        return int.from_bytes(self.read_bytes(address, 2), "little")

    def read_word(self, address: int) -> int:
        return int.from_bytes(self.read_bytes(address, 4), "little")

    def write_byte(self, address: int, value: int):
        self.write_bytes(address, (value & 0xFF).to_bytes(1, "little"))

    def write_half_word(self, address: int, value: int):
        self.write_bytes(address, (value & 0xFFFF).to_bytes(2, "little"))

    def write_word(self, address: int, value: int):
        self.write_bytes(address, (value & 0xFFFFFFFF).to_bytes(4, "little"))

    def load_program(self, program: bytes, start_address: int = 0):
        self.write_bytes(start_address, bytes(program))
        logger.info("Loaded %d bytes at 0x%08X", len(program), start_address)

    def dump(self, start: int, length: int) -> bytes:
        """Copy of ``length`` bytes from ``start`` (used for snapshots)."""
        return self.read_bytes(start, length)


class Memory(BaseMemory):
    """Fixed-capacity memory backed by a numpy byte array."""

    def __init__(self, size: int = DEFAULT_MEMORY_SIZE):
        if size <= 0:
            raise ValueError(f"memory size must be positive, got {size}")
        self.size = size
        self.memory = np.zeros(size, dtype=np.uint8)

    def check_range(self, address: int, width: int):
        if address < 0 or address + width - 1 >= self.size:
            raise AddressOutOfRange(address, width, self.size)

    def read_bytes(self, address: int, width: int) -> bytes:
        self.check_range(address, width)
        return self.memory[address:address + width].tobytes()

    def write_bytes(self, address: int, data: bytes):
        if not data:
            return
        self.check_range(address, len(data))
        self.memory[address:address + len(data)] = np.frombuffer(data, dtype=np.uint8)

    def dump(self, start: int, length: int) -> bytes:
        # snapshot windows are clipped to capacity instead of raising
        end = min(self.size, start + length)
        if start >= end:
            return b""
        return self.memory[start:end].tobytes()

    def clear(self):
        self.memory.fill(0)


class SparseMemory(BaseMemory):
    """
    Address -> byte map. Unwritten addresses read as zero and any address is
    accepted, which simulates an unbounded zero-initialised space.
    """

    def __init__(self):
        self.memory = {}

    def read_bytes(self, address: int, width: int) -> bytes:
        return bytes(self.memory.get((address + i) & 0xFFFFFFFF, 0) for i in range(width))

    def write_bytes(self, address: int, data: bytes):
        for i, value in enumerate(data):
            self.memory[(address + i) & 0xFFFFFFFF] = value

    def clear(self):
        self.memory.clear()


def make_memory(kind: str = "fixed", size: int = DEFAULT_MEMORY_SIZE) -> BaseMemory:
    if kind == "fixed":
        return Memory(size)
    if kind == "sparse":
        return SparseMemory()
    raise ValueError(f"unknown memory kind: {kind!r} (expected 'fixed' or 'sparse')")
