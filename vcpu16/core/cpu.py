"""Fetch-decode-execute interpreter for the 16-bit ISA.

The CPU owns its register file, memory and call stack. It is responsible for:
fetching the word at ``pc``, decoding it through ``vcpu16.core.isa`` and
dispatching on the opcode.

Every execution fault (bad address, division by zero, stack overflow or
underflow, undecodable word) halts the machine and is reported through
logging. ``step()`` never raises a ``MachineFault`` to its caller; the fault
is kept on the CPU so the final state stays inspectable.
"""

from __future__ import annotations

import logging
import operator
import sys
from typing import Callable, Optional, assert_never

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

from vcpu16.core.address_space import CallStack, WordMemory
from vcpu16.core.exceptions import AddressFault, DivisionByZeroFault, MachineFault
from vcpu16.core.isa import Instruction, Opcode, SourceKind, decode_word
from vcpu16.core.register import RegisterFile
from vcpu16.interfaces.cpu import ICPU, CpuSnapshot, RegisterValue
from vcpu16.utils.consts import ConstUtils

logger = logging.getLogger(__name__)

HALT_REASON_HLT = "HLT"


def _divide(dividend: int, divisor: int) -> int:
    """Integer division truncating toward zero, like C."""
    if divisor == 0:
        raise DivisionByZeroFault()
    quotient = abs(dividend) // abs(divisor)
    return -quotient if (dividend < 0) != (divisor < 0) else quotient


def _shift_left(value: int, amount: int) -> int:
    return value << (amount & ConstUtils.SHIFT_COUNT_MASK)


def _shift_right(value: int, amount: int) -> int:
    # Arithmetic shift: registers are signed.
    return value >> (amount & ConstUtils.SHIFT_COUNT_MASK)


def _compare(left: int, right: int) -> int:
    return 0 if left == right else 1


# Rd := op(Rd, source value)
_ALU_OPERATIONS: dict[Opcode, Callable[[int, int], int]] = {
    Opcode.ADD: operator.add,
    Opcode.SUB: operator.sub,
    Opcode.MUL: operator.mul,
    Opcode.DIV: _divide,
    Opcode.AND: operator.and_,
    Opcode.OR: operator.or_,
    Opcode.XOR: operator.xor,
    Opcode.CMP: _compare,
    Opcode.SHL: _shift_left,
    Opcode.SHR: _shift_right,
}


class CPU(ICPU):
    """Virtual 16-bit CPU.

    Responsibilities:
    - Hold machine state (registers, pc, memory, call stack, halted flag)
    - Run one fetch-decode-execute cycle per ``step()``
    - Convert faults into a reported, clean halt

    The CPU does NOT drive its own run loop; that is the job of
    ``SimulationEngine`` so that harnesses can cap the number of steps.
    """

    def __init__(
        self,
        memory: WordMemory,
        stack: CallStack,
        registers: Optional[RegisterFile] = None,
    ):
        """Initialize CPU with pre-built memory and call stack.

        Args:
            memory: Word memory holding both code and data
            stack: Call stack for CALL/RET return addresses
            registers: Register file (a fresh four-register file by default)
        """
        self.memory = memory
        self.stack = stack
        self.registers = registers if registers is not None else RegisterFile()
        self._pc = 0
        self._halted = False
        self._halt_reason: Optional[str] = None
        self._fault: Optional[MachineFault] = None

    @property
    def pc(self) -> int:
        return self._pc

    @property
    def sp(self) -> int:
        return self.stack.sp

    @property
    @override
    def halted(self) -> bool:
        return self._halted

    @property
    def halt_reason(self) -> Optional[str]:
        """``"HLT"`` after a normal halt, the fault message after a fault."""
        return self._halt_reason

    @property
    def fault(self) -> Optional[MachineFault]:
        """The fault that halted the machine, if any."""
        return self._fault

    def load_program(self, words) -> None:
        """Load a program image into memory and reset to power-on state."""
        self.memory.load_image(words)
        self.reset()

    @override
    def reset(self) -> None:
        """Reset CPU: clear registers and stack, restore memory, pc to 0."""
        self.registers.reset()
        self.memory.reset()
        self.stack.reset()
        self._pc = 0
        self._halted = False
        self._halt_reason = None
        self._fault = None

    @override
    def step(self) -> None:
        """Execute one instruction. Does nothing once halted."""
        if self._halted:
            return

        pc = self._pc
        try:
            instruction = decode_word(self._fetch())
            logger.debug(f"PC={pc} {instruction}")
            self._execute(instruction)
        except MachineFault as fault:
            if fault.pc is None:
                fault.pc = pc
            self._halt_on_fault(fault)

    def get_register(self, index: int) -> int:
        """Get a general purpose register by index (0-3)."""
        return self.registers.read(index)

    def set_register(self, index: int, value: int) -> None:
        """Set a general purpose register by index (0-3)."""
        self.registers.write(index, value)

    @override
    def get_snapshot(self) -> CpuSnapshot:
        registers = [
            RegisterValue(desc.name, self.registers.read(desc.index))
            for desc in self.registers.descriptors
        ]
        registers.append(RegisterValue("PC", self._pc, "control"))
        registers.append(RegisterValue("SP", self.sp, "control"))
        return CpuSnapshot(
            registers=registers,
            flags={"halted": self._halted, "faulted": self._fault is not None},
        )

    # Private helpers -------------------------------------------------------

    def _fetch(self) -> int:
        if not self.memory.contains(self._pc):
            raise AddressFault(self._pc, "memory (program counter)")
        word = self.memory.read(self._pc)
        self._pc += 1
        return word

    def _execute(self, instruction: Instruction) -> None:
        opcode = instruction.opcode
        match opcode:
            case Opcode.MOV:
                self._execute_mov(instruction)
            case (
                Opcode.ADD
                | Opcode.SUB
                | Opcode.MUL
                | Opcode.DIV
                | Opcode.AND
                | Opcode.OR
                | Opcode.XOR
                | Opcode.CMP
                | Opcode.SHL
                | Opcode.SHR
            ):
                operation = _ALU_OPERATIONS[opcode]
                result = operation(
                    self.registers.read(instruction.register),
                    self._source_value(instruction),
                )
                self.registers.write(instruction.register, result)
            case Opcode.JMP:
                self._pc = self._target(instruction)
            case Opcode.CALL:
                self.stack.push(self._pc)
                self._pc = self._target(instruction)
            case Opcode.RET:
                self._pc = self.stack.pop()
            case Opcode.HLT:
                self._halt(HALT_REASON_HLT)
                logger.info(f"CPU halted at PC={self._pc - 1}")
            case _:
                assert_never(opcode)

    def _execute_mov(self, instruction: Instruction) -> None:
        if instruction.dest_address is not None:
            self.memory.write(
                instruction.dest_address, self.registers.read(instruction.register)
            )
            return
        self.registers.write(instruction.register, self._source_value(instruction))

    def _source_value(self, instruction: Instruction) -> int:
        kind = instruction.source_kind
        if kind is SourceKind.REGISTER:
            return self.registers.read(instruction.source)
        if kind is SourceKind.MEMORY:
            return self.memory.read(instruction.source)
        return instruction.source

    @staticmethod
    def _target(instruction: Instruction) -> int:
        if instruction.target is None:
            raise ValueError(f"{instruction.opcode.name} decoded without a target")
        return instruction.target

    def _halt(self, reason: str) -> None:
        self._halted = True
        self._halt_reason = reason

    def _halt_on_fault(self, fault: MachineFault) -> None:
        logger.error(f"CPU fault at PC={fault.pc}: {fault}")
        self._fault = fault
        self._halt(str(fault))
