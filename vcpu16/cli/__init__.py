"""Command line entry points (``vcpu16-asm`` and ``vcpu16-run``)."""

import logging
import sys


def configure_logging(verbose: bool = False) -> None:
    """Send diagnostics to stderr, keeping stdout for the program report."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
