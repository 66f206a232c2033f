"""Assemble a ``.asmy`` source file into a binary program image."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from vcpu16.assembler import assemble_file, format_listing
from vcpu16.cli import configure_logging
from vcpu16.core.exceptions import Vcpu16Error
from vcpu16.utils.config_loader import load_config

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="vcpu16-asm", description="Assemble vcpu16 source into a binary image."
    )
    parser.add_argument("source", help="Input source file (.asmy)")
    parser.add_argument("output", help="Output binary image (.bin)")
    parser.add_argument("--config", help="YAML config (default: bundled config.yaml)")
    parser.add_argument(
        "--listing",
        action="store_true",
        help="Print an address / word / disassembly listing",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log every encoded word"
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(path=args.config)
        expected = config.assembler.source_extension
        if Path(args.source).suffix != expected:
            logger.error(f"File extension not valid. Expected '{expected}'")
            return 1
        image = assemble_file(args.source, args.output, syntax=config.assembler)
    except (Vcpu16Error, OSError) as exc:
        logger.error(str(exc))
        return 1

    if args.listing:
        for line in format_listing(image, config.assembler):
            print(line)
    print(f"Assembly complete. Output written to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
