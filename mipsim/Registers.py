from Errors import ParseError

REGISTER_NAMES = [
    "zero", "at", "v0", "v1", "a0", "a1", "a2", "a3",
    "t0", "t1", "t2", "t3", "t4", "t5", "t6", "t7",
    "s0", "s1", "s2", "s3", "s4", "s5", "s6", "s7",
    "t8", "t9", "k0", "k1", "gp", "sp", "fp", "ra",
]

REGISTER_INDEX = {name: i for i, name in enumerate(REGISTER_NAMES)}

RA = 31


def register_index(token: str) -> int:
    """
    Resolve an operand token such as ``$t0``, ``t0``, ``$8`` or ``8`` to a
    register number. Anything else is a ParseError.
    """
    name = token.strip()
    if name.startswith("$"):
        name = name[1:]
    name = name.lower()

    if name.isdigit():
        index = int(name)
        if 0 <= index < 32:
            return index
        raise ParseError(f"register number out of range: {token}")

    if name in REGISTER_INDEX:
        return REGISTER_INDEX[name]

    raise ParseError(f"invalid register: {token}")


def register_name(index: int) -> str:
    return "$" + REGISTER_NAMES[index]


class RegisterFile:
    """32 unsigned 32-bit registers; $zero always reads 0."""

    def __init__(self):
        self.registers = [0] * 32

    def reset(self):
        self.registers = [0] * 32

    def read(self, index: int) -> int:
        return self.registers[index]

    def write(self, index: int, value: int):
        if index != 0:  # $zero is hard-wired
            self.registers[index] = value & 0xFFFFFFFF

    def __getitem__(self, index):
        return self.read(index)

    def __setitem__(self, index, value):
        self.write(index, value)

    def as_tuple(self):
        return tuple(self.registers)
