"""Word-addressed memory and the call stack.

Memory is a single flat array of 16-bit words that holds both code and data.
The call stack is a separate fixed-capacity array of return addresses.
Both raise ``MachineFault`` subclasses on misuse so the CPU can halt cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from vcpu16.core.exceptions import (
    AddressFault,
    ImageFormatError,
    StackOverflowFault,
    StackUnderflowFault,
)
from vcpu16.utils.consts import ConstUtils


@dataclass(frozen=True)
class AddressRange:
    """An immutable word address range."""

    base: int
    size: int

    def contains(self, address: int) -> bool:
        return self.base <= address < self.base + self.size

    def __str__(self) -> str:
        return f"{self.base}-{self.base + self.size - 1}"


class WordMemory:
    """Volatile, read-write storage of 16-bit words.

    The loaded program image is remembered so that ``reset()`` returns the
    memory to its power-on state: image at address 0, zeros after it.
    """

    def __init__(self, size: int, name: str = "memory"):
        if size <= 0:
            raise ValueError("Memory size must be positive")
        self.range = AddressRange(0, size)
        self.name = name
        self._data = [0] * size
        self._image: tuple[int, ...] = ()

    @property
    def size(self) -> int:
        return self.range.size

    def contains(self, address: int) -> bool:
        return self.range.contains(address)

    def load_image(self, words: Iterable[int]) -> None:
        """Load a program image at address 0.

        Raises:
            ImageFormatError: if the image does not fit in memory
        """
        image = tuple(word & ConstUtils.MASK_16_BITS for word in words)
        if len(image) > self.size:
            raise ImageFormatError(
                f"Program of {len(image)} words exceeds {self.name} of {self.size} words",
                details={"words": len(image), "capacity": self.size},
            )
        self._image = image
        self.reset()

    def read(self, address: int) -> int:
        if not self.range.contains(address):
            raise AddressFault(address, self.name)
        return self._data[address]

    def write(self, address: int, value: int) -> None:
        if not self.range.contains(address):
            raise AddressFault(address, self.name)
        self._data[address] = value & ConstUtils.MASK_16_BITS

    def reset(self) -> None:
        """Restore the loaded image and zero everything after it."""
        self._data[:] = [0] * self.size
        self._data[: len(self._image)] = self._image


class CallStack:
    """Fixed-capacity stack of return addresses.

    ``sp`` is the index of the next free slot, so it equals the call depth.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("Stack capacity must be positive")
        self.capacity = capacity
        self._slots = [0] * capacity
        self._sp = 0

    @property
    def sp(self) -> int:
        return self._sp

    def __len__(self) -> int:
        return self._sp

    def push(self, address: int) -> None:
        if self._sp >= self.capacity:
            raise StackOverflowFault(self.capacity)
        self._slots[self._sp] = address
        self._sp += 1

    def pop(self) -> int:
        if self._sp == 0:
            raise StackUnderflowFault()
        self._sp -= 1
        return self._slots[self._sp]

    def frames(self) -> tuple[int, ...]:
        """Return the live return addresses, oldest first."""
        return tuple(self._slots[: self._sp])

    def reset(self) -> None:
        self._slots = [0] * self.capacity
        self._sp = 0
