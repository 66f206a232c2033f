"""General purpose register file.

The machine has a closed, fixed set of four signed registers (R0-R3). Values
behave like a C ``int``: every write wraps into the signed 32-bit range.
"""

from __future__ import annotations

from dataclasses import dataclass

from vcpu16.core.isa import NUM_REGISTERS
from vcpu16.utils.consts import wrap_signed


@dataclass(frozen=True)
class RegisterDescriptor:
    """Metadata about a single register, used for reporting."""

    index: int
    name: str
    reset_value: int = 0


class RegisterFile:
    """Fixed-length storage for the general purpose registers.

    Indexing is validated on every access so that decoder bugs surface as
    errors instead of silently growing the register set.
    """

    def __init__(self, count: int = NUM_REGISTERS, reset_value: int = 0):
        if count <= 0:
            raise ValueError("Register count must be positive")
        self._reset_value = wrap_signed(reset_value)
        self._values = [self._reset_value] * count
        self.descriptors = tuple(
            RegisterDescriptor(index=i, name=f"R{i}", reset_value=self._reset_value)
            for i in range(count)
        )

    def __len__(self) -> int:
        return len(self._values)

    def read(self, index: int) -> int:
        """Return the value held by register ``index``."""
        self._validate_index(index)
        return self._values[index]

    def write(self, index: int, value: int) -> None:
        """Store ``value`` in register ``index``, wrapping to signed 32-bit."""
        self._validate_index(index)
        self._values[index] = wrap_signed(value)

    def values(self) -> tuple[int, ...]:
        """Return an immutable copy of all register values."""
        return tuple(self._values)

    def reset(self) -> None:
        """Reset all registers."""
        self._values = [self._reset_value] * len(self._values)

    # Private helpers -------------------------------------------------------

    def _validate_index(self, index: int) -> None:
        if not 0 <= index < len(self._values):
            raise IndexError(
                f"Invalid register index {index}; must be 0-{len(self._values) - 1}"
            )
