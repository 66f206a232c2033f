"""CPU interface used by the simulation engine and the command line tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Mapping


class ICPU(ABC):
    """CPU abstraction used by the simulation engine."""

    @property
    @abstractmethod
    def halted(self) -> bool:
        """True once the machine reached its terminal state."""
        ...

    @abstractmethod
    def step(self) -> None:
        """Execute a single fetch-decode-execute cycle."""
        ...

    @abstractmethod
    def reset(self) -> None:
        """Reset CPU state."""
        ...

    @abstractmethod
    def get_snapshot(self) -> "CpuSnapshot":
        """Return a snapshot of CPU registers and flags."""
        ...

    def tick(self, cycles: int = 1) -> None:
        """Advance the CPU by the given number of cycles, stopping at halt."""
        for _ in range(cycles):
            if self.halted:
                return
            self.step()


@dataclass(frozen=True)
class RegisterValue:
    """Single register value for reporting."""

    name: str
    value: int
    group: str = "general"


@dataclass(frozen=True)
class CpuSnapshot:
    """Snapshot of CPU state for reporting."""

    registers: Iterable[RegisterValue]
    flags: Mapping[str, bool]
