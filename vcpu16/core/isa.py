"""Instruction word layout shared by the assembler and the CPU.

Both sides of the toolchain go through ``encode_word`` and ``decode_word``,
so a program assembled here always decodes with the same field widths.

Word layout (bit 15 is the MSB)::

    15..12  opcode
    11      D   direct memory operand (MOV only)
    10..8   R   destination register
    7       S   source is a literal payload rather than a register
    6..4    Rs  source register when S is clear
    6       M   payload is a memory address when S is set
    5..0        payload (immediate or source address) when S is set
    11..0       JMP/CALL target

    With D set (MOV loads and stores):
    10      L   1 = load ``Rd := mem[a]``, 0 = store ``mem[a] := Rs``
    9..8        register
    7..0        address ``a``

Loads and stores share the 8-bit address field, so every word a program
stores can be loaded back. Every numeric field is truncated to its width
with a two's complement mask, so ``MOV R0, 70`` encodes the immediate ``6``
and ``MOV R0, -1`` encodes ``63``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from vcpu16.core.exceptions import DecodeFault
from vcpu16.utils.consts import ConstUtils, mask_to_width

NUM_REGISTERS = 4

OPCODE_SHIFT = 12
MEMORY_OPERAND_FLAG = 1 << 11
LOAD_FLAG = 1 << 10
MEMORY_REG_MASK = 0x3
REG_SHIFT = 8
REG_FIELD_MASK = 0x7
SRC_LITERAL_FLAG = 1 << 7
SRC_MEMORY_FLAG = 1 << 6
SRC_REG_SHIFT = 4

PAYLOAD_BITS = 6
ADDRESS_BITS = 8
TARGET_BITS = 12


class Opcode(IntEnum):
    """The closed set of operation codes (bits 15..12). 0x0 is unassigned."""

    MOV = 0x1
    ADD = 0x2
    SUB = 0x3
    MUL = 0x4
    DIV = 0x5
    AND = 0x6
    OR = 0x7
    XOR = 0x8
    CMP = 0x9
    JMP = 0xA
    CALL = 0xB
    RET = 0xC
    SHL = 0xD
    SHR = 0xE
    HLT = 0xF


class SourceKind(Enum):
    """How the second operand of a two-operand instruction is interpreted."""

    NONE = "none"
    REGISTER = "register"
    IMMEDIATE = "immediate"
    MEMORY = "memory"


NO_OPERAND_OPCODES = frozenset({Opcode.HLT, Opcode.RET})
JUMP_OPCODES = frozenset({Opcode.JMP, Opcode.CALL})
TWO_OPERAND_OPCODES = frozenset(set(Opcode) - NO_OPERAND_OPCODES - JUMP_OPCODES)


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction.

    ``register`` is the R field: the destination register, or the register
    whose value is stored when ``dest_address`` is set. ``source`` holds the
    register index, immediate value or memory address selected by
    ``source_kind``.
    """

    opcode: Opcode
    register: int = 0
    source_kind: SourceKind = SourceKind.NONE
    source: int = 0
    dest_address: Optional[int] = None
    target: Optional[int] = None

    @property
    def is_store(self) -> bool:
        return self.dest_address is not None


def encode_word(instruction: Instruction) -> int:
    """Pack an instruction into a 16-bit word.

    Numeric fields are truncated to their width; register indices are not,
    because an out-of-range register is a caller bug rather than data.
    """
    opcode = instruction.opcode
    word = int(opcode) << OPCODE_SHIFT

    if opcode in NO_OPERAND_OPCODES:
        return word

    if opcode in JUMP_OPCODES:
        if instruction.target is None:
            raise ValueError(f"{opcode.name} requires a target address")
        return word | mask_to_width(instruction.target, TARGET_BITS)

    _check_register(instruction.register)
    word |= instruction.register << REG_SHIFT
    kind = instruction.source_kind

    if instruction.dest_address is not None:
        if opcode is not Opcode.MOV:
            raise ValueError(f"{opcode.name} cannot write to memory")
        word |= MEMORY_OPERAND_FLAG
        return word | mask_to_width(instruction.dest_address, ADDRESS_BITS)

    if opcode is Opcode.MOV and kind is SourceKind.MEMORY:
        word |= MEMORY_OPERAND_FLAG | LOAD_FLAG
        return word | mask_to_width(instruction.source, ADDRESS_BITS)

    if kind is SourceKind.REGISTER:
        _check_register(instruction.source)
        return word | (instruction.source << SRC_REG_SHIFT)
    if kind is SourceKind.IMMEDIATE:
        return word | SRC_LITERAL_FLAG | mask_to_width(instruction.source, PAYLOAD_BITS)
    if kind is SourceKind.MEMORY:
        word |= SRC_LITERAL_FLAG | SRC_MEMORY_FLAG
        return word | mask_to_width(instruction.source, PAYLOAD_BITS)

    raise ValueError(f"{opcode.name} requires a source operand")


def decode_word(word: int) -> Instruction:
    """Unpack a 16-bit word.

    Raises:
        DecodeFault: for the unassigned opcode, a register index above 3,
            a direct memory operand on an opcode other than MOV, or a MOV
            load that does not use the direct memory operand form.
    """
    word &= ConstUtils.MASK_16_BITS
    raw_opcode = word >> OPCODE_SHIFT
    try:
        opcode = Opcode(raw_opcode)
    except ValueError:
        raise DecodeFault(word, f"unknown opcode 0x{raw_opcode:X}") from None

    if opcode in NO_OPERAND_OPCODES:
        return Instruction(opcode)

    if opcode in JUMP_OPCODES:
        return Instruction(opcode, target=mask_to_width(word, TARGET_BITS))

    if word & MEMORY_OPERAND_FLAG:
        if opcode is not Opcode.MOV:
            raise DecodeFault(word, f"{opcode.name} has no direct memory operand")
        register = (word >> REG_SHIFT) & MEMORY_REG_MASK
        address = mask_to_width(word, ADDRESS_BITS)
        if word & LOAD_FLAG:
            return Instruction(
                opcode, register=register, source_kind=SourceKind.MEMORY, source=address
            )
        return Instruction(opcode, register=register, dest_address=address)

    register = (word >> REG_SHIFT) & REG_FIELD_MASK
    if register >= NUM_REGISTERS:
        raise DecodeFault(word, f"register field R{register} does not exist")

    if word & SRC_LITERAL_FLAG:
        if word & SRC_MEMORY_FLAG:
            if opcode is Opcode.MOV:
                raise DecodeFault(word, "MOV loads use the direct memory operand form")
            kind = SourceKind.MEMORY
        else:
            kind = SourceKind.IMMEDIATE
        return Instruction(
            opcode,
            register=register,
            source_kind=kind,
            source=mask_to_width(word, PAYLOAD_BITS),
        )

    source = (word >> SRC_REG_SHIFT) & REG_FIELD_MASK
    if source >= NUM_REGISTERS:
        raise DecodeFault(word, f"source register R{source} does not exist")
    return Instruction(
        opcode,
        register=register,
        source_kind=SourceKind.REGISTER,
        source=source,
    )


def _check_register(index: int) -> None:
    if not 0 <= index < NUM_REGISTERS:
        raise ValueError(f"Invalid register index {index}; must be 0-{NUM_REGISTERS - 1}")
