"""Utilities for building a configured machine.

This module provides factories to reduce boilerplate when creating a CPU.
It encodes the common pattern (memory and stack sized from configuration,
program loaded, state reset) in reusable functions.
"""

from typing import Iterable, Optional

from vcpu16.core.address_space import CallStack, WordMemory
from vcpu16.core.cpu import CPU
from vcpu16.utils.config_loader import MachineConfig


def create_cpu_from_config(machine_config: Optional[MachineConfig] = None) -> CPU:
    """Create a CPU with memory and call stack sized from configuration.

    Args:
        machine_config: Machine sizes; defaults to 1024 words / 256 frames

    Returns:
        A CPU in power-on state with empty memory
    """
    machine_config = machine_config or MachineConfig()
    memory = WordMemory(machine_config.memory_size)
    stack = CallStack(machine_config.stack_size)
    return CPU(memory, stack)


def create_machine(
    words: Iterable[int], machine_config: Optional[MachineConfig] = None
) -> CPU:
    """Create a CPU and load a program image into it.

    Raises:
        ImageFormatError: if the image does not fit in memory
    """
    cpu = create_cpu_from_config(machine_config)
    cpu.load_program(words)
    return cpu
