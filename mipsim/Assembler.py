import logging
import re

import InstructionSet as isa
from Errors import ParseError
from Registers import register_index

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"
LABEL_TERMINATOR = ":"

LABEL_PATTERN = re.compile(r"^[A-Za-z_.][A-Za-z0-9_.]*$")
MEMORY_OPERAND = re.compile(r"^(?P<offset>[^()]*)\((?P<base>[^()]+)\)$")

# mnemonic -> number of operands
OPERAND_COUNT = {
    "add": 3, "sub": 3, "and": 3, "or": 3, "nor": 3, "slt": 3, "sltu": 3,
    "sll": 3, "srl": 3,
    "jr": 1,
    "addi": 3, "andi": 3, "ori": 3, "slti": 3, "sltiu": 3,
    "lw": 2, "lh": 2, "lb": 2, "lhu": 2, "sw": 2, "sh": 2, "sb": 2,
    "beq": 3, "bne": 3,
    "j": 1, "jal": 1,
}


def encode_r_type(rs, rt, rd, shamt, funct, opcode=0):
    return ((opcode & 0x3F) << 26 | (rs & 0x1F) << 21 | (rt & 0x1F) << 16
            | (rd & 0x1F) << 11 | (shamt & 0x1F) << 6 | (funct & 0x3F))


def encode_i_type(opcode, rs, rt, immediate):
    # only the low 16 bits are kept; the signed range is not checked
    return (opcode & 0x3F) << 26 | (rs & 0x1F) << 21 | (rt & 0x1F) << 16 | (immediate & 0xFFFF)


def encode_j_type(opcode, target):
    return (opcode & 0x3F) << 26 | (target & 0x03FFFFFF)


def parse_number(token: str) -> int:
    """Decimal or 0x-prefixed hex literal, optionally negative."""
    text = token.strip().lower()
    negative = text.startswith("-")
    if negative or text.startswith("+"):
        text = text[1:]
    try:
        if text.startswith("0x"):
            value = int(text[2:], 16)
        else:
            if not text.isdigit():
                raise ValueError(token)
            value = int(text, 10)
    except ValueError:
        raise ParseError(f"invalid number: {token}") from None
    return -value if negative else value


def clean_line(line: str) -> str:
    """Strip the trailing comment and surrounding whitespace."""
    index = line.find(COMMENT_MARKER)
    if index >= 0:
        line = line[:index]
    return line.strip()


def split_label(line: str):
    """
    Split ``"loop: addi ..."`` into ``("loop", "addi ...")``. Lines without a
    label come back as ``(None, line)``.
    """
    index = line.find(LABEL_TERMINATOR)
    if index < 0:
        return None, line
    label = line[:index].strip()
    if not LABEL_PATTERN.match(label):
        raise ParseError(f"invalid label: {label!r}")
    return label, line[index + 1:].strip()


class Assembler:
    """
    Two-pass assembler: pass 1 binds labels to byte addresses, pass 2 encodes
    every instruction line into a 32-bit word.
    """

    def __init__(self, base_address: int = 0):
        self.base_address = base_address
        self.labels = {}

    def assemble(self, source):
        """
        Args:
            source (str | list[str]): the program text, or its lines

        Returns:
            list[int]: machine words in program order
        """
        if isinstance(source, str):
            lines = source.splitlines()
        else:
            lines = list(source)

        self.collect_labels(lines)

        words = []
        address = self.base_address
        for number, raw in enumerate(lines, start=1):
            line = clean_line(raw)
            if not line:
                continue
            try:
                _, text = split_label(line)
                if not text:
                    continue
                words.append(self.parse_instruction(text, address))
            except ParseError as e:
                raise ParseError(e.message, number, raw.strip()) from None
            address += 4

        logger.info("Assembled %d instructions, %d labels", len(words), len(self.labels))
        return words

    def collect_labels(self, lines):
        self.labels = {}
        address = self.base_address

        for number, raw in enumerate(lines, start=1):
            line = clean_line(raw)
            if not line:
                continue
            try:
                label, text = split_label(line)
            except ParseError as e:
                raise ParseError(e.message, number, raw.strip()) from None

            if label is not None:
                if label in self.labels:
                    raise ParseError(f"duplicate label: {label}", number, raw.strip())
                self.labels[label] = address

            # label-only lines do not consume an address
            if text:
                address += 4

        logger.debug("Label Map: %s", self.labels)
        return self.labels

    def parse_instruction(self, text: str, address: int) -> int:
        parts = text.split(None, 1)
        mnemonic = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""
        operands = [op for op in re.split(r"[\s,]+", rest) if op]

        if not isa.is_mnemonic(mnemonic):
            raise ParseError(f"unknown instruction: {parts[0]}")

        if mnemonic in isa.LOADS or mnemonic in isa.STORES:
            # "0 ($sp)" arrives as two tokens
            if len(operands) > 2:
                operands = [operands[0], "".join(operands[1:])]

        expected = OPERAND_COUNT[mnemonic]
        if len(operands) != expected:
            raise ParseError(
                f"{mnemonic} expects {expected} operand(s), got {len(operands)}")

        if mnemonic in isa.R_FUNCT:
            return self.parse_r_type(mnemonic, operands)
        if mnemonic in isa.J_OPCODE:
            return self.parse_j_type(mnemonic, operands[0])
        if mnemonic in isa.LOADS or mnemonic in isa.STORES:
            return self.parse_load_store(mnemonic, operands)
        if mnemonic in isa.BRANCHES:
            return self.parse_branch(mnemonic, operands, address)

        rt = register_index(operands[0])
        rs = register_index(operands[1])
        immediate = parse_number(operands[2])
        return encode_i_type(isa.I_OPCODE[mnemonic], rs, rt, immediate)

    def parse_r_type(self, mnemonic, operands):
        funct = isa.R_FUNCT[mnemonic]

        if mnemonic == "jr":
            return encode_r_type(register_index(operands[0]), 0, 0, 0, funct)

        if mnemonic in isa.SHIFTS:
            rd = register_index(operands[0])
            rt = register_index(operands[1])
            shamt = parse_number(operands[2]) & 0x1F
            return encode_r_type(0, rt, rd, shamt, funct)

        rd = register_index(operands[0])
        rs = register_index(operands[1])
        rt = register_index(operands[2])
        return encode_r_type(rs, rt, rd, 0, funct)

    def parse_load_store(self, mnemonic, operands):
        rt = register_index(operands[0])

        match = MEMORY_OPERAND.match(operands[1])
        if match is None:
            raise ParseError(f"malformed memory operand, expected offset(base): {operands[1]}")

        offset_text = match.group("offset").strip()
        offset = parse_number(offset_text) if offset_text else 0
        rs = register_index(match.group("base"))
        return encode_i_type(isa.I_OPCODE[mnemonic], rs, rt, offset)

    def parse_branch(self, mnemonic, operands, address):
        rs = register_index(operands[0])
        rt = register_index(operands[1])
        target = operands[2]

        if target in self.labels:
            # in instruction units, relative to the word after the branch
            offset = (self.labels[target] - (address + 4)) // 4
        elif LABEL_PATTERN.match(target):
            raise ParseError(f"undefined label: {target}")
        else:
            offset = parse_number(target)

        return encode_i_type(isa.I_OPCODE[mnemonic], rs, rt, offset)

    def parse_j_type(self, mnemonic, target):
        if target in self.labels:
            field = (self.labels[target] >> 2) & 0x03FFFFFF
        elif LABEL_PATTERN.match(target):
            raise ParseError(f"undefined label: {target}")
        else:
            field = parse_number(target) & 0x03FFFFFF
        return encode_j_type(isa.J_OPCODE[mnemonic], field)


def assemble(source, base_address: int = 0):
    return Assembler(base_address).assemble(source)
