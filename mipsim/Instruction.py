"""
Instruction decoder.

A decoded word is one of three frozen records, RType, IType or JType, each
carrying only its own fields. ``decode`` is total: an opcode or funct missing
from the instruction set decodes with the mnemonic ``"unknown"`` and only the
execution engine rejects it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Union

import ALU
import InstructionSet as isa
from Registers import register_name


class InstructionType(Enum):
    R = "R"
    I = "I"
    J = "J"


@dataclass(frozen=True)
class RType:
    raw: int
    mnemonic: str
    rs: int
    rt: int
    rd: int
    shamt: int
    funct: int
    opcode: int = 0
    kind: InstructionType = InstructionType.R

    @property
    def is_jump(self) -> bool:
        return self.mnemonic == "jr"

    @property
    def is_branch(self) -> bool:
        return False

    @property
    def hex(self) -> str:
        return f"0x{self.raw:08X}"

    def __str__(self):
        if self.mnemonic in isa.SHIFTS:
            return f"{self.mnemonic} {register_name(self.rd)}, {register_name(self.rt)}, {self.shamt}"
        if self.mnemonic == "jr":
            return f"jr {register_name(self.rs)}"
        return (f"{self.mnemonic} {register_name(self.rd)}, "
                f"{register_name(self.rs)}, {register_name(self.rt)}")


@dataclass(frozen=True)
class IType:
    raw: int
    mnemonic: str
    opcode: int
    rs: int
    rt: int
    immediate: int
    kind: InstructionType = InstructionType.I

    @property
    def is_jump(self) -> bool:
        return False

    @property
    def is_branch(self) -> bool:
        return self.mnemonic in isa.BRANCHES

    @property
    def signed_immediate(self) -> int:
        return ALU.to_signed(ALU.sign_extend(self.immediate))

    @property
    def hex(self) -> str:
        return f"0x{self.raw:08X}"

    def __str__(self):
        rs, rt = register_name(self.rs), register_name(self.rt)
        if self.mnemonic in isa.LOADS or self.mnemonic in isa.STORES:
            return f"{self.mnemonic} {rt}, {self.signed_immediate}({rs})"
        if self.mnemonic in isa.BRANCHES:
            return f"{self.mnemonic} {rs}, {rt}, {self.signed_immediate}"
        if self.mnemonic in isa.ZERO_EXTENDED:
            return f"{self.mnemonic} {rt}, {rs}, {self.immediate}"
        return f"{self.mnemonic} {rt}, {rs}, {self.signed_immediate}"


@dataclass(frozen=True)
class JType:
    raw: int
    mnemonic: str
    opcode: int
    target: int
    kind: InstructionType = InstructionType.J

    @property
    def is_jump(self) -> bool:
        return True

    @property
    def is_branch(self) -> bool:
        return False

    @property
    def hex(self) -> str:
        return f"0x{self.raw:08X}"

    def __str__(self):
        return f"{self.mnemonic} 0x{self.target:07X}"


Instruction = Union[RType, IType, JType]


def decode(word: int) -> Instruction:
    word &= 0xFFFFFFFF
    opcode = (word >> 26) & 0x3F
    kind = isa.instruction_kind(opcode)

    if kind == "R":
        funct = word & 0x3F
        return RType(
            raw=word,
            mnemonic=isa.r_type_mnemonic(funct),
            rs=(word >> 21) & 0x1F,
            rt=(word >> 16) & 0x1F,
            rd=(word >> 11) & 0x1F,
            shamt=(word >> 6) & 0x1F,
            funct=funct,
        )

    if kind == "J":
        return JType(
            raw=word,
            mnemonic=isa.j_type_mnemonic(opcode),
            opcode=opcode,
            target=word & 0x03FFFFFF,
        )

    return IType(
        raw=word,
        mnemonic=isa.i_type_mnemonic(opcode),
        opcode=opcode,
        rs=(word >> 21) & 0x1F,
        rt=(word >> 16) & 0x1F,
        immediate=word & 0xFFFF,
    )


def disassemble(word: int) -> str:
    return str(decode(word))
