"""vcpu16: a minimal 16-bit ISA, its assembler and a virtual CPU.

The assembler and the CPU never call each other; they share only the word
layout in ``vcpu16.core.isa`` and the little-endian image format.

Getting started:
    from vcpu16 import assemble, create_machine, SimulationEngine

    image = assemble("MOV R0, 5\\nMOV R1, 3\\nADD R0, R1\\nHLT")
    cpu = create_machine(image)
    SimulationEngine().run(cpu)
    cpu.registers.values()  # (8, 3, 0, 0)
"""

from vcpu16.assembler import (
    ProgramImage,
    assemble,
    assemble_file,
    assemble_line,
    disassemble_word,
    read_image,
    write_image,
)
from vcpu16.core.builders import create_cpu_from_config, create_machine
from vcpu16.core.cpu import CPU
from vcpu16.core.isa import Instruction, Opcode, decode_word, encode_word
from vcpu16.core.simulation_engine import SimulationEngine, StopReason
from vcpu16.utils.config_loader import get_config, load_config

__all__ = [
    # ISA
    "Instruction",
    "Opcode",
    "decode_word",
    "encode_word",
    # Assembler
    "ProgramImage",
    "assemble",
    "assemble_file",
    "assemble_line",
    "disassemble_word",
    "read_image",
    "write_image",
    # Executor
    "CPU",
    "SimulationEngine",
    "StopReason",
    "create_cpu_from_config",
    "create_machine",
    # Configuration
    "get_config",
    "load_config",
]
