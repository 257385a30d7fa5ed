class SimulatorError(Exception):
    """Base class for every error the simulator raises."""


class ParseError(SimulatorError):
    """
    Malformed assembly: unknown mnemonic or register, bad number, undefined
    label, malformed load/store operand.
    """

    def __init__(self, message, line_number=None, line=None):
        self.message = message
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message} ({line!r})"
        super().__init__(message)


class UnsupportedInstruction(SimulatorError):
    """A decoded word whose opcode/funct is not in the instruction set."""

    def __init__(self, word: int, pc: int = None):
        self.word = word
        self.pc = pc
        opcode = (word >> 26) & 0x3F
        where = f" at PC 0x{pc:08X}" if pc is not None else ""
        if opcode == 0:
            detail = f"funct=0x{word & 0x3F:02X}"
        else:
            detail = f"opcode=0x{opcode:02X}"
        super().__init__(f"unsupported instruction 0x{word:08X} ({detail}){where}")


class AddressOutOfRange(SimulatorError):
    def __init__(self, address: int, width: int, size: int):
        self.address = address
        self.width = width
        self.size = size
        super().__init__(
            f"memory access of {width} byte(s) at 0x{address:08X} "
            f"exceeds capacity of {size} bytes")


class SimulatorStateError(SimulatorError):
    """Operation not valid in the controller's current state (e.g. step while running)."""
