"""Program images and whole-source assembly.

A program image is a flat little-endian sequence of 16-bit words with no
header. Assembly is fail-fast: the first bad line aborts the run and no
output file is written.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from vcpu16.assembler.encoder import DEFAULT_SYNTAX, assemble_line
from vcpu16.core.exceptions import AssemblyError, ImageFormatError
from vcpu16.utils.config_loader import AssemblerConfig
from vcpu16.utils.consts import ConstUtils

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class ProgramImage:
    """Immutable sequence of instruction words."""

    words: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        for word in self.words:
            if not 0 <= word <= ConstUtils.MASK_16_BITS:
                raise ImageFormatError(f"Word {word} does not fit in 16 bits")

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[int]:
        return iter(self.words)

    def to_bytes(self) -> bytes:
        return b"".join(
            word.to_bytes(ConstUtils.WORD_BYTES, "little") for word in self.words
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "ProgramImage":
        """Parse a raw image.

        Raises:
            ImageFormatError: if the data is not a whole number of words
        """
        size = ConstUtils.WORD_BYTES
        if len(data) % size:
            raise ImageFormatError(
                f"Image of {len(data)} bytes is not a whole number of 16-bit words",
                details={"bytes": len(data)},
            )
        return cls(
            tuple(
                int.from_bytes(data[offset : offset + size], "little")
                for offset in range(0, len(data), size)
            )
        )


def assemble(source: str, syntax: AssemblerConfig = DEFAULT_SYNTAX) -> ProgramImage:
    """Assemble a whole source text, one word per instruction line.

    Raises:
        AssemblyError: on the first line that cannot be encoded
    """
    return assemble_lines(source.splitlines(), syntax)


def assemble_lines(
    lines: Iterable[str], syntax: AssemblerConfig = DEFAULT_SYNTAX
) -> ProgramImage:
    words = []
    for line_number, line in enumerate(lines, 1):
        word = assemble_line(line, line_number=line_number, syntax=syntax)
        if word is not None:
            words.append(word)
    return ProgramImage(tuple(words))


def read_image(path: PathLike) -> ProgramImage:
    """Read a binary program image from disk."""
    return ProgramImage.from_bytes(Path(path).read_bytes())


def write_image(path: PathLike, image: ProgramImage) -> None:
    """Write a program image, replacing the target only once fully written."""
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    try:
        tmp.write_bytes(image.to_bytes())
        tmp.replace(target)
    finally:
        if tmp.exists():
            tmp.unlink()


def assemble_file(
    source_path: PathLike,
    output_path: PathLike,
    syntax: Optional[AssemblerConfig] = None,
) -> ProgramImage:
    """Assemble a source file into a binary image file.

    The whole program is assembled in memory first; the output file is only
    written once every line encoded successfully.

    Raises:
        AssemblyError: if the source is not UTF-8 or a line cannot be encoded
        OSError: if the source cannot be read or the output cannot be written
    """
    try:
        source = Path(source_path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise AssemblyError(
            f"Source file {source_path} is not valid UTF-8: {exc.reason} "
            f"at byte {exc.start}",
            details={"path": str(source_path), "byte": exc.start},
        ) from exc
    image = assemble(source, syntax or DEFAULT_SYNTAX)
    write_image(output_path, image)
    logger.info(f"Assembled {len(image)} words from {source_path} into {output_path}")
    return image
