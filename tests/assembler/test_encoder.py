import logging

import pytest

from vcpu16.assembler.encoder import (
    OperandKind,
    assemble_line,
    classify_operand,
    parse_instruction,
    tokenize,
)
from vcpu16.core.exceptions import AssemblyError
from vcpu16.core.isa import Instruction, Opcode, SourceKind
from vcpu16.utils.config_loader import AssemblerConfig


class TestTokenize:
    @pytest.mark.parametrize("line", ["", "   ", "; just a comment", "   ;indented", "\n"])
    def test_blank_and_comment_lines(self, line):
        assert tokenize(line) is None

    @pytest.mark.parametrize(
        "line, tokens",
        [
            ("HLT", ["HLT"]),
            ("MOV R0, 5", ["MOV", "R0", "5"]),
            ("MOV R0,5", ["MOV", "R0", "5"]),
            ("MOV R0 5", ["MOV", "R0", "5"]),
            ("  ADD\tR1 ,  R2  ", ["ADD", "R1", "R2"]),
            ("JMP $4 ; loop forever", ["JMP", "$4"]),
        ],
    )
    def test_separators(self, line, tokens):
        assert tokenize(line) == tokens

    def test_custom_comment_marker(self):
        syntax = AssemblerConfig(comment_marker="#")
        assert tokenize("HLT # stop", syntax) == ["HLT"]
        assert tokenize("# only", syntax) is None


class TestClassifyOperand:
    def test_memory_register_immediate(self):
        assert classify_operand("$12").kind is OperandKind.MEMORY
        assert classify_operand("$12").value == 12
        assert classify_operand("R3").kind is OperandKind.REGISTER
        assert classify_operand("R3").value == 3
        assert classify_operand("-4").kind is OperandKind.IMMEDIATE
        assert classify_operand("-4").value == -4
        assert classify_operand("+7").value == 7

    @pytest.mark.parametrize("token", ["$", "$abc", "$-"])
    def test_invalid_memory_address(self, token):
        with pytest.raises(AssemblyError, match="Invalid memory address"):
            classify_operand(token)

    @pytest.mark.parametrize("token", ["R4", "R9", "r0", "R10"])
    def test_invalid_register(self, token):
        with pytest.raises(AssemblyError, match="Invalid register"):
            classify_operand(token)

    @pytest.mark.parametrize("token", ["\u0665", "1\u0662", "\uff13"])
    def test_only_ascii_digits_are_decimal(self, token):
        with pytest.raises(AssemblyError, match="Invalid operand"):
            classify_operand(token)
        with pytest.raises(AssemblyError, match="Invalid memory address"):
            classify_operand("$" + token)
        with pytest.raises(AssemblyError, match="Invalid operand"):
            classify_operand("R" + token)

    @pytest.mark.parametrize("token", ["0x10", "five", "R", "5a"])
    def test_invalid_operand(self, token):
        with pytest.raises(AssemblyError, match="Invalid operand"):
            classify_operand(token, line_number=9)

    def test_custom_memory_sigil(self):
        syntax = AssemblerConfig(memory_sigil="@")
        assert classify_operand("@5", syntax).kind is OperandKind.MEMORY
        with pytest.raises(AssemblyError):
            classify_operand("$5", syntax)


class TestAssembleLine:
    @pytest.mark.parametrize(
        "line, word",
        [
            ("MOV R0, 5", 0x1085),
            ("MOV R1, 3", 0x1183),
            ("ADD R0, R1", 0x2010),
            ("HLT", 0xF000),
            ("RET", 0xC000),
            ("JMP $0", 0xA000),
            ("CALL $5", 0xB005),
            ("MOV $10, R2", 0x1A0A),
            ("MOV R3, $7", 0x1F07),
            ("MOV R1, $200", 0x1DC8),
            ("ADD R1, $7", 0x21C7),
            ("SHL R2, 4", 0xD284),
            ("CMP R0, R0", 0x9000),
        ],
    )
    def test_known_encodings(self, line, word):
        assert assemble_line(line) == word

    def test_blank_line_yields_no_word(self):
        assert assemble_line("   ; nothing") is None

    def test_every_mnemonic_is_accepted(self):
        for opcode in Opcode:
            if opcode in (Opcode.HLT, Opcode.RET):
                line = opcode.name
            elif opcode in (Opcode.JMP, Opcode.CALL):
                line = f"{opcode.name} $1"
            else:
                line = f"{opcode.name} R1, R2"
            assert assemble_line(line) >> 12 == opcode

    def test_word_depends_only_on_line_text(self):
        assert assemble_line("SUB R2, 9", line_number=1) == assemble_line(
            "SUB R2, 9", line_number=40
        )

    @pytest.mark.parametrize(
        "line, word",
        [
            ("MOV R0, 70", 0x1086),
            ("MOV R0, -1", 0x10BF),
            ("MOV R0, 64", 0x1080),
            ("JMP $4096", 0xA000),
            ("MOV $256, R0", 0x1800),
            ("MOV R0, $256", 0x1C00),
            ("ADD R0, $64", 0x20C0),
        ],
    )
    def test_out_of_range_values_are_truncated(self, line, word, caplog):
        with caplog.at_level(logging.WARNING, logger="vcpu16.assembler.encoder"):
            assert assemble_line(line, line_number=2) == word
        assert any("truncated" in rec.getMessage() for rec in caplog.records)

    def test_in_range_value_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="vcpu16.assembler.encoder"):
            assemble_line("MOV R0, 63")
        assert not caplog.records

    @pytest.mark.parametrize(
        "line, message",
        [
            ("FOO R0, 1", "Unknown instruction"),
            ("mov R0, 1", "Unknown instruction"),
            ("MOV R5, 1", "Invalid register"),
            ("MOV R0, abc", "Invalid operand"),
            ("HLT R0", "takes no operands"),
            ("RET 1", "takes no operands"),
            ("JMP 4", "single memory address"),
            ("CALL R1", "single memory address"),
            ("JMP", "single memory address"),
            ("JMP $1, $2", "single memory address"),
            ("MOV R0", "destination and a source"),
            ("ADD", "destination and a source"),
            ("ADD R0, R1, R2", "destination and a source"),
            ("ADD $5, R0", "cannot write to memory"),
            ("MOV $5, 3", "requires a register source"),
            ("MOV $5, $6", "requires a register source"),
            ("MOV 5, R0", "must be a register or memory address"),
        ],
    )
    def test_errors(self, line, message):
        with pytest.raises(AssemblyError, match=message) as exc_info:
            assemble_line(line, line_number=4)

        assert exc_info.value.line_number == 4
        assert exc_info.value.line == line
        assert str(exc_info.value).startswith("Line 4: ")


def test_parse_instruction_shapes():
    assert parse_instruction(["MOV", "R2", "$9"]) == Instruction(
        Opcode.MOV, register=2, source_kind=SourceKind.MEMORY, source=9
    )
    assert parse_instruction(["MOV", "$200", "R1"]) == Instruction(
        Opcode.MOV, register=1, dest_address=200
    )
    assert parse_instruction(["CALL", "$12"]) == Instruction(Opcode.CALL, target=12)
