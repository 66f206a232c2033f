import argparse
import sys
from pathlib import Path

# Ensure local repo package is used even if another "vcpu16" is on PYTHONPATH.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vcpu16 import SimulationEngine, assemble, create_machine
from vcpu16.assembler import format_listing


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Assemble and run a vcpu16 program.")
    parser.add_argument(
        "source",
        nargs="?",
        default="examples/programs/add.asmy",
        help="Path to .asmy source",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=10_000,
        help="Stop after this many instructions if the program never halts",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    image = assemble(Path(args.source).read_text(encoding="utf-8"))
    for line in format_listing(image):
        print(line)

    cpu = create_machine(image)
    stop = SimulationEngine().run(cpu, max_steps=args.max_steps)

    print(f"stop={stop.reason} steps={stop.steps} pc={cpu.pc} sp={cpu.sp}")
    for reg in cpu.get_snapshot().registers:
        print(f"  {reg.name:>2} = {reg.value}")


if __name__ == "__main__":
    main()
