"""Core modules for the virtual CPU.

Core infrastructure shared by the assembler and the executor:
- isa: instruction word layout, encode_word / decode_word
- register: fixed four-register file
- address_space: word memory and call stack
- cpu: fetch-decode-execute interpreter
- simulation_engine: run loop with optional step cap
- exceptions: assembly-time and execution-time error hierarchy
"""

from vcpu16.core.address_space import AddressRange, CallStack, WordMemory
from vcpu16.core.cpu import CPU
from vcpu16.core.exceptions import (
    AddressFault,
    AssemblyError,
    ConfigurationError,
    DecodeFault,
    DivisionByZeroFault,
    ImageFormatError,
    MachineFault,
    StackOverflowFault,
    StackUnderflowFault,
    Vcpu16Error,
)
from vcpu16.core.isa import Instruction, Opcode, SourceKind, decode_word, encode_word
from vcpu16.core.register import RegisterDescriptor, RegisterFile
from vcpu16.core.simulation_engine import SimulationEngine, StopReason

__all__ = [
    # ISA
    "Instruction",
    "Opcode",
    "SourceKind",
    "decode_word",
    "encode_word",
    # Machine state
    "AddressRange",
    "CallStack",
    "WordMemory",
    "RegisterDescriptor",
    "RegisterFile",
    # CPU
    "CPU",
    "SimulationEngine",
    "StopReason",
    # Errors
    "Vcpu16Error",
    "ConfigurationError",
    "AssemblyError",
    "ImageFormatError",
    "MachineFault",
    "AddressFault",
    "DecodeFault",
    "DivisionByZeroFault",
    "StackOverflowFault",
    "StackUnderflowFault",
]
