from pathlib import Path

import pytest

EXAMPLES = Path(__file__).resolve().parents[2] / "examples" / "programs"


def _source(name):
    return (EXAMPLES / name).read_text(encoding="utf-8")


@pytest.mark.integration
def test_add_example(run_source):
    cpu, stop = run_source(_source("add.asmy"))

    assert stop.reason == "halt"
    assert cpu.registers.values() == (8, 3, 0, 0)


@pytest.mark.integration
def test_subroutine_example(run_source):
    cpu, stop = run_source(_source("subroutine.asmy"))

    assert stop.reason == "halt"
    assert cpu.registers.values() == (144, 144, 0, 0)
    assert cpu.memory.read(100) == 144
    assert cpu.sp == 0


@pytest.mark.integration
def test_shifts_example(run_source):
    cpu, stop = run_source(_source("shifts.asmy"))

    assert stop.reason == "halt"
    assert cpu.registers.values() == (-256, -16, -3, 0)
