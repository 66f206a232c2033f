"""Run a binary program image on the virtual CPU and report final state."""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from vcpu16.assembler import read_image
from vcpu16.cli import configure_logging
from vcpu16.core.builders import create_machine
from vcpu16.core.cpu import CPU
from vcpu16.core.exceptions import Vcpu16Error
from vcpu16.core.simulation_engine import SimulationEngine
from vcpu16.utils.config_loader import load_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FAULT = 2


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="vcpu16-run", description="Run a vcpu16 program image until it halts."
    )
    parser.add_argument("program", help="Binary program image (.bin)")
    parser.add_argument("--config", help="YAML config (default: bundled config.yaml)")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Trace every executed instruction"
    )
    return parser.parse_args(argv)


def report(cpu: CPU) -> None:
    """Print final register values and stack pointer to stdout."""
    print("Simulation complete. Final register values:")
    for reg in cpu.get_snapshot().registers:
        if reg.group == "general":
            print(f"{reg.name}: {reg.value}")
    print(f"Final Stack Pointer: {cpu.sp}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(path=args.config)
        image = read_image(args.program)
        cpu = create_machine(image, config.machine)
    except (Vcpu16Error, OSError) as exc:
        logger.error(str(exc))
        return EXIT_ERROR

    print("Starting simulation...")
    SimulationEngine().run(cpu)
    report(cpu)
    return EXIT_FAULT if cpu.fault is not None else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
