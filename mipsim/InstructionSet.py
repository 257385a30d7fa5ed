"""Static tables of the supported opcodes and funct codes."""

UNKNOWN = "unknown"

# R-type: opcode 0, selected by funct
R_TYPE = {
    0x20: "add",
    0x22: "sub",
    0x24: "and",
    0x25: "or",
    0x27: "nor",
    0x00: "sll",
    0x02: "srl",
    0x2A: "slt",
    0x2B: "sltu",
    0x08: "jr",
}

# I-type: selected by opcode
I_TYPE = {
    0x08: "addi",
    0x0C: "andi",
    0x0D: "ori",
    0x0A: "slti",
    0x0B: "sltiu",
    0x23: "lw",
    0x21: "lh",
    0x20: "lb",
    0x25: "lhu",
    0x2B: "sw",
    0x29: "sh",
    0x28: "sb",
    0x04: "beq",
    0x05: "bne",
}

J_TYPE = {
    0x02: "j",
    0x03: "jal",
}

R_FUNCT = {name: funct for funct, name in R_TYPE.items()}
I_OPCODE = {name: opcode for opcode, name in I_TYPE.items()}
J_OPCODE = {name: opcode for opcode, name in J_TYPE.items()}

SHIFTS = ("sll", "srl")
BRANCHES = ("beq", "bne")
JUMPS = ("j", "jal", "jr")

# mnemonic -> (width in bytes, sign-extend on load)
LOADS = {
    "lw": (4, False),
    "lh": (2, True),
    "lb": (1, True),
    "lhu": (2, False),
}
STORES = {
    "sw": 4,
    "sh": 2,
    "sb": 1,
}

# immediates of these are zero-extended, every other I-type sign-extends
ZERO_EXTENDED = ("andi", "ori")


def instruction_kind(opcode: int) -> str:
    if opcode == 0:
        return "R"
    if opcode in (0x02, 0x03):
        return "J"
    return "I"


def r_type_mnemonic(funct: int) -> str:
    return R_TYPE.get(funct, UNKNOWN)


def i_type_mnemonic(opcode: int) -> str:
    return I_TYPE.get(opcode, UNKNOWN)


def j_type_mnemonic(opcode: int) -> str:
    return J_TYPE.get(opcode, UNKNOWN)


def is_supported(word: int) -> bool:
    opcode = (word >> 26) & 0x3F
    kind = instruction_kind(opcode)
    if kind == "R":
        return (word & 0x3F) in R_TYPE
    if kind == "J":
        return opcode in J_TYPE
    return opcode in I_TYPE


def is_mnemonic(name: str) -> bool:
    return name in R_FUNCT or name in I_OPCODE or name in J_OPCODE
