"""Single-line encoder: source text to one 16-bit instruction word.

Syntax::

    MNEMONIC [operand[, operand]]   ; optional comment

Operands are classified in order: a leading ``$`` marks a memory address,
``R0``-``R3`` name a register, anything else must be a decimal immediate.
Blank lines and comment lines produce no word.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from vcpu16.core.exceptions import AssemblyError
from vcpu16.core.isa import (
    ADDRESS_BITS,
    JUMP_OPCODES,
    NO_OPERAND_OPCODES,
    NUM_REGISTERS,
    PAYLOAD_BITS,
    TARGET_BITS,
    Instruction,
    Opcode,
    SourceKind,
    encode_word,
)
from vcpu16.utils.config_loader import AssemblerConfig
from vcpu16.utils.consts import mask_to_width

logger = logging.getLogger(__name__)

REGISTER_NAMES = {f"R{i}": i for i in range(NUM_REGISTERS)}
MNEMONICS = {opcode.name: opcode for opcode in Opcode}

_DECIMAL_RE = re.compile(r"^[+-]?[0-9]+$")
_REGISTER_LIKE_RE = re.compile(r"^[Rr][0-9]+$")
_OPERAND_SPLIT_RE = re.compile(r"[,\s]+")

DEFAULT_SYNTAX = AssemblerConfig()


class OperandKind(Enum):
    REGISTER = "register"
    IMMEDIATE = "immediate"
    MEMORY = "memory"


@dataclass(frozen=True)
class Operand:
    """A classified source operand, before truncation to a field width."""

    kind: OperandKind
    value: int
    text: str


def tokenize(line: str, syntax: AssemblerConfig = DEFAULT_SYNTAX) -> Optional[list[str]]:
    """Split a line into ``[mnemonic, *operands]``.

    Returns None for blank lines and comment lines. Operands may be separated
    by commas, whitespace or both.
    """
    text = line.split(syntax.comment_marker, 1)[0].strip()
    if not text:
        return None

    parts = text.split(None, 1)
    if len(parts) == 1:
        return parts
    operands = [tok for tok in _OPERAND_SPLIT_RE.split(parts[1].strip()) if tok]
    return [parts[0], *operands]


def classify_operand(
    token: str,
    syntax: AssemblerConfig = DEFAULT_SYNTAX,
    line_number: Optional[int] = None,
) -> Operand:
    """Classify an operand as memory address, register or immediate."""
    if token.startswith(syntax.memory_sigil):
        digits = token[len(syntax.memory_sigil) :]
        if not _DECIMAL_RE.match(digits):
            raise AssemblyError(
                f"Invalid memory address {token!r}", line_number=line_number
            )
        return Operand(OperandKind.MEMORY, int(digits, 10), token)

    if token in REGISTER_NAMES:
        return Operand(OperandKind.REGISTER, REGISTER_NAMES[token], token)

    if _DECIMAL_RE.match(token):
        return Operand(OperandKind.IMMEDIATE, int(token, 10), token)

    if _REGISTER_LIKE_RE.match(token):
        raise AssemblyError(f"Invalid register {token!r}", line_number=line_number)
    raise AssemblyError(f"Invalid operand {token!r}", line_number=line_number)


def assemble_line(
    line: str,
    line_number: Optional[int] = None,
    syntax: AssemblerConfig = DEFAULT_SYNTAX,
) -> Optional[int]:
    """Encode one source line.

    Returns:
        The 16-bit word, or None for blank and comment lines.

    Raises:
        AssemblyError: unknown mnemonic, invalid register or operand, or an
            operand shape the mnemonic does not accept.
    """
    tokens = tokenize(line, syntax)
    if tokens is None:
        return None

    try:
        instruction = parse_instruction(tokens, syntax, line_number)
    except AssemblyError as exc:
        if exc.line is None:
            exc.line = line.rstrip("\n")
            exc.details["line"] = exc.line
        raise

    word = encode_word(instruction)
    logger.debug(f"line {line_number}: {line.strip()!r} -> 0x{word:04X}")
    return word


def parse_instruction(
    tokens: list[str],
    syntax: AssemblerConfig = DEFAULT_SYNTAX,
    line_number: Optional[int] = None,
) -> Instruction:
    """Shape a tokenized line into an ``Instruction``."""
    mnemonic, raw_operands = tokens[0], tokens[1:]
    opcode = MNEMONICS.get(mnemonic)
    if opcode is None:
        raise AssemblyError(f"Unknown instruction {mnemonic!r}", line_number=line_number)

    operands = [classify_operand(tok, syntax, line_number) for tok in raw_operands]

    if opcode in NO_OPERAND_OPCODES:
        if operands:
            raise AssemblyError(
                f"{mnemonic} takes no operands", line_number=line_number
            )
        return Instruction(opcode)

    if opcode in JUMP_OPCODES:
        if len(operands) != 1 or operands[0].kind is not OperandKind.MEMORY:
            raise AssemblyError(
                f"{mnemonic} expects a single memory address operand",
                line_number=line_number,
            )
        target = _truncate(operands[0], TARGET_BITS, line_number)
        return Instruction(opcode, target=target)

    if len(operands) != 2:
        raise AssemblyError(
            f"{mnemonic} expects a destination and a source operand",
            line_number=line_number,
        )
    dest, src = operands

    if dest.kind is OperandKind.MEMORY:
        if opcode is not Opcode.MOV:
            raise AssemblyError(
                f"{mnemonic} cannot write to memory; destination must be a register",
                line_number=line_number,
            )
        if src.kind is not OperandKind.REGISTER:
            raise AssemblyError(
                "Store to memory requires a register source", line_number=line_number
            )
        address = _truncate(dest, ADDRESS_BITS, line_number)
        return Instruction(opcode, register=src.value, dest_address=address)

    if dest.kind is not OperandKind.REGISTER:
        raise AssemblyError(
            f"Destination {dest.text!r} must be a register or memory address",
            line_number=line_number,
        )

    if src.kind is OperandKind.REGISTER:
        return Instruction(
            opcode,
            register=dest.value,
            source_kind=SourceKind.REGISTER,
            source=src.value,
        )
    if src.kind is OperandKind.MEMORY:
        # MOV loads share the wider address field with stores.
        bits = ADDRESS_BITS if opcode is Opcode.MOV else PAYLOAD_BITS
        return Instruction(
            opcode,
            register=dest.value,
            source_kind=SourceKind.MEMORY,
            source=_truncate(src, bits, line_number),
        )
    return Instruction(
        opcode,
        register=dest.value,
        source_kind=SourceKind.IMMEDIATE,
        source=_truncate(src, PAYLOAD_BITS, line_number),
    )


def _truncate(operand: Operand, bits: int, line_number: Optional[int]) -> int:
    value = mask_to_width(operand.value, bits)
    if value != operand.value:
        logger.warning(
            f"line {line_number}: {operand.kind.value} {operand.text} "
            f"truncated to {bits} bits ({value})"
        )
    return value
