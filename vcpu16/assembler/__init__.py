"""Assembler: source text to program image, and back for listings."""

from vcpu16.assembler.disassembler import disassemble_word, format_listing
from vcpu16.assembler.encoder import assemble_line, classify_operand, tokenize
from vcpu16.assembler.program import (
    ProgramImage,
    assemble,
    assemble_file,
    read_image,
    write_image,
)

__all__ = [
    "ProgramImage",
    "assemble",
    "assemble_file",
    "assemble_line",
    "classify_operand",
    "disassemble_word",
    "format_listing",
    "read_image",
    "tokenize",
    "write_image",
]
