"""Abstract interfaces for the virtual CPU."""

from vcpu16.interfaces.cpu import ICPU, CpuSnapshot, RegisterValue

__all__ = ["ICPU", "CpuSnapshot", "RegisterValue"]
