"""Simulation engine for driving a CPU to halt."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from vcpu16.core.cpu import CPU

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StopReason:
    """Why a run returned.

    ``reason`` is ``"halt"`` after HLT, ``"fault"`` when a fault halted the
    machine and ``"limit"`` when the caller's step cap was reached first.
    """

    reason: str
    steps: int
    address: Optional[int] = None
    detail: Optional[str] = None


class SimulationEngine:
    """Minimal simulation engine.

    This delegates execution to the CPU's step/reset methods. The engine
    imposes no limit of its own: a program that never halts runs forever
    unless the caller passes ``max_steps``.
    """

    def run(self, cpu: "CPU", max_steps: Optional[int] = None) -> StopReason:
        """Run the CPU until it halts or ``max_steps`` instructions executed."""
        if max_steps is not None and max_steps < 0:
            raise ValueError("max_steps must be >= 0")

        steps = 0
        while not cpu.halted:
            if max_steps is not None and steps >= max_steps:
                logger.debug(f"Step limit {max_steps} reached at PC={cpu.pc}")
                return StopReason(reason="limit", steps=steps, address=cpu.pc)
            cpu.step()
            steps += 1

        fault = cpu.fault
        if fault is not None:
            return StopReason(
                reason="fault", steps=steps, address=fault.pc, detail=str(fault)
            )
        return StopReason(reason="halt", steps=steps, address=cpu.pc)

    def step(self, cpu: "CPU", cycles: int = 1) -> None:
        """Advance the CPU by a number of instructions."""
        if cycles < 0:
            raise ValueError("cycles must be >= 0")
        cpu.tick(cycles)

    def reset(self, cpu: "CPU") -> None:
        """Reset the CPU."""
        cpu.reset()
