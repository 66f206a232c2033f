"""Render instruction words back into source text."""

from __future__ import annotations

from typing import Iterable

from vcpu16.assembler.encoder import DEFAULT_SYNTAX
from vcpu16.core.exceptions import DecodeFault
from vcpu16.core.isa import Instruction, SourceKind, decode_word
from vcpu16.utils.config_loader import AssemblerConfig


def format_instruction(
    instruction: Instruction, syntax: AssemblerConfig = DEFAULT_SYNTAX
) -> str:
    name = instruction.opcode.name
    sigil = syntax.memory_sigil

    if instruction.target is not None:
        return f"{name} {sigil}{instruction.target}"
    if instruction.dest_address is not None:
        return f"{name} {sigil}{instruction.dest_address}, R{instruction.register}"

    kind = instruction.source_kind
    if kind is SourceKind.NONE:
        return name
    if kind is SourceKind.REGISTER:
        source = f"R{instruction.source}"
    elif kind is SourceKind.MEMORY:
        source = f"{sigil}{instruction.source}"
    else:
        source = str(instruction.source)
    return f"{name} R{instruction.register}, {source}"


def disassemble_word(word: int, syntax: AssemblerConfig = DEFAULT_SYNTAX) -> str:
    """Decode a word and render it as a source line.

    Raises:
        DecodeFault: if the word is not a valid instruction
    """
    return format_instruction(decode_word(word), syntax)


def format_listing(
    words: Iterable[int], syntax: AssemblerConfig = DEFAULT_SYNTAX
) -> list[str]:
    """Address / hex word / source listing. Undecodable words show as data."""
    lines = []
    for address, word in enumerate(words):
        try:
            text = disassemble_word(word, syntax)
        except DecodeFault:
            text = f".word 0x{word:04X}"
        lines.append(f"{address:04d}  0x{word:04X}  {text}")
    return lines
