import logging

import ALU
import InstructionSet as isa
from Errors import UnsupportedInstruction
from Instruction import IType, JType, RType, decode
from Memory import Memory
from Registers import RA, RegisterFile

logger = logging.getLogger(__name__)


class Core:
    """
    Single-cycle MIPS core: register file, program counter and memory, plus
    the fetch-decode-execute cycle over them.
    """

    def __init__(self, memory=None):
        self.memory = memory if memory is not None else Memory()
        self.registers = RegisterFile()
        self.pc = 0
        self.program_start = 0
        self.program_end = 0

    def reset(self):
        self.registers.reset()
        self.pc = self.program_start

    def load_program(self, program: bytes, start_address: int = 0):
        """
        Install a little-endian program image at ``start_address`` and point
        the PC at it. Registers are cleared.

        An image that does not fit raises AddressOutOfRange before anything
        is touched, so the previous program stays installed.
        """
        if program:
            self.memory.check_range(start_address, len(program))
        self.memory.clear()
        self.memory.load_program(program, start_address)
        self.program_start = start_address
        self.program_end = start_address + len(program)
        self.registers.reset()
        self.pc = start_address

    def has_finished(self) -> bool:
        """True once the PC has left the loaded code."""
        return not (self.program_start <= self.pc < self.program_end)

    def fetch(self) -> int:
        return self.memory.read_word(self.pc)

    def execute_cycle(self):
        """
        Run one fetch-decode-execute cycle.

        Returns:
            tuple: (decoded instruction, terminate flag)

        Raises:
            UnsupportedInstruction: opcode/funct missing from the instruction
                set; nothing is modified in that case.
            AddressOutOfRange: a load or store left the fixed-size memory.
        """
        pc = self.pc
        word = self.fetch()
        instruction = decode(word)
        logger.debug("PC=0x%08X %s %s", pc, instruction.hex, instruction)

        if not isa.is_supported(word):
            raise UnsupportedInstruction(word, pc)

        if isinstance(instruction, RType):
            terminate = self.execute_r_type(instruction)
        elif isinstance(instruction, IType):
            terminate = self.execute_i_type(instruction)
        elif isinstance(instruction, JType):
            terminate = self.execute_j_type(instruction)
        else:
            raise UnsupportedInstruction(word, pc)

        # jumps and branches have already set the PC
        if not (instruction.is_jump or instruction.is_branch):
            self.pc = (self.pc + 4) & ALU.MASK32

        return instruction, terminate

    def execute_r_type(self, instr: RType) -> bool:
        regs = self.registers
        rs, rt = regs[instr.rs], regs[instr.rt]
        op = instr.mnemonic

        if op == "add":
            regs[instr.rd] = ALU.add(rs, rt)
        elif op == "sub":
            regs[instr.rd] = ALU.subtract(rs, rt)
        elif op == "and":
            regs[instr.rd] = ALU.and_(rs, rt)
        elif op == "or":
            regs[instr.rd] = ALU.or_(rs, rt)
        elif op == "nor":
            regs[instr.rd] = ALU.nor(rs, rt)
        elif op == "sll":
            regs[instr.rd] = ALU.shift_left(rt, instr.shamt)
        elif op == "srl":
            regs[instr.rd] = ALU.shift_right(rt, instr.shamt)
        elif op == "slt":
            regs[instr.rd] = 1 if ALU.less_than(rs, rt) else 0
        elif op == "sltu":
            regs[instr.rd] = 1 if ALU.less_than_unsigned(rs, rt) else 0
        elif op == "jr":
            self.pc = rs
        else:
            raise UnsupportedInstruction(instr.raw, self.pc)
        return False

    def execute_i_type(self, instr: IType) -> bool:
        regs = self.registers
        rs, rt = regs[instr.rs], regs[instr.rt]
        op = instr.mnemonic
        imm = ALU.sign_extend(instr.immediate)

        if op == "addi":
            regs[instr.rt] = ALU.add(rs, imm)
        elif op == "andi":
            regs[instr.rt] = ALU.and_(rs, ALU.zero_extend(instr.immediate))
        elif op == "ori":
            regs[instr.rt] = ALU.or_(rs, ALU.zero_extend(instr.immediate))
        elif op == "slti":
            regs[instr.rt] = 1 if ALU.less_than(rs, imm) else 0
        elif op == "sltiu":
            regs[instr.rt] = 1 if ALU.less_than_unsigned(rs, imm) else 0
        elif op in isa.LOADS:
            width, signed = isa.LOADS[op]
            address = ALU.add(rs, imm)
            value = int.from_bytes(self.memory.read_bytes(address, width), "little")
            if signed:
                value = ALU.sign_extend(value, width * 8)
            regs[instr.rt] = value
        elif op in isa.STORES:
            width = isa.STORES[op]
            address = ALU.add(rs, imm)
            self.memory.write_bytes(address, (rt & ((1 << (width * 8)) - 1)).to_bytes(width, "little"))
        elif op == "beq" or op == "bne":
            taken = ALU.equal(rs, rt) if op == "beq" else ALU.not_equal(rs, rt)
            next_pc = ALU.add(self.pc, 4)
            if taken:
                next_pc = ALU.add(next_pc, ALU.shift_left(imm, 2))
            self.pc = next_pc
        else:
            raise UnsupportedInstruction(instr.raw, self.pc)
        return False

    def execute_j_type(self, instr: JType) -> bool:
        target = (self.pc & 0xF0000000) | (instr.target << 2)
        if instr.mnemonic == "jal":
            self.registers[RA] = ALU.add(self.pc, 4)
        elif instr.mnemonic != "j":
            raise UnsupportedInstruction(instr.raw, self.pc)
        self.pc = target
        return False
