"""Constants and utility values for the virtual CPU."""


class ConstUtils:
    """Bitwise masks and machine-wide constants."""

    MASK_16_BITS = 0xFFFF
    """16-bit mask: 0xFFFF"""

    WORD_BYTES = 2
    """Size of one instruction/memory word in the program image."""

    REGISTER_BITS = 32
    """General purpose registers behave like a C ``int``."""

    SHIFT_COUNT_MASK = 0x1F
    """Shift amounts are taken modulo the register width."""


def mask_to_width(value: int, bits: int) -> int:
    """Truncate value to an unsigned field of the given width (two's complement)."""
    return value & ((1 << bits) - 1)


def wrap_signed(value: int, bits: int = ConstUtils.REGISTER_BITS) -> int:
    """Wrap an arbitrary Python int into a signed two's complement range.

    >>> wrap_signed(2**31)
    -2147483648
    """
    sign_bit = 1 << (bits - 1)
    return mask_to_width(value + sign_bit, bits) - sign_bit
