"""Custom exceptions used throughout the vcpu16 package.

Two tiers exist. Assembly-time errors (``AssemblyError``) abort a whole
assembly run. Execution-time errors (``MachineFault`` and subclasses) are
raised inside the CPU and converted into a clean halt by ``CPU.step()``.
"""

from typing import Any, Optional


class Vcpu16Error(Exception):
    """Base exception for all vcpu16 errors.

    All package-specific exceptions inherit from this class, so callers can
    catch every assembler, loader and machine error with a single clause.
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """

        super().__init__(message)
        self.details = details or {}


class ConfigurationError(Vcpu16Error):
    """Raised when there's an error in configuration.

    This includes:
    - Unreadable or malformed YAML
    - Invalid configuration value
    - Configuration validation failures
    """

    def __init__(
        self,
        config_key: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize configuration error.

        Args:
            config_key: The configuration key that caused the error
            message: Description of what's wrong. If omitted, config_key is
                treated as the message and the key defaults to "configuration".
            details: Additional context
        """
        if message is None:
            message = config_key or "Invalid configuration"
            config_key = "configuration"
        if config_key is None:
            config_key = "configuration"

        full_message = f"Configuration error for '{config_key}': {message}"
        super().__init__(message=full_message, details=details)
        self.config_key = config_key


class AssemblyError(Vcpu16Error):
    """Raised when a source line cannot be encoded.

    Examples:
    - Unknown mnemonic
    - Invalid register name
    - Operand of the wrong shape for the mnemonic
    """

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        if line is not None:
            details = details or {}
            details["line"] = line
        super().__init__(message=message, details=details)
        self.line_number = line_number
        self.line = line


class ImageFormatError(Vcpu16Error):
    """Raised when a binary program image cannot be loaded.

    Examples:
    - Odd number of bytes (not a whole number of 16-bit words)
    - More words than the machine memory can hold
    """


class MachineFault(Vcpu16Error):
    """Base exception for all execution-time faults.

    A fault never escapes ``CPU.step()``; it halts the machine and is kept
    on the CPU for reporting.
    """

    def __init__(
        self,
        message: str,
        pc: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details)
        self.pc = pc


class AddressFault(MachineFault):
    """Raised when the program counter or a memory operand leaves memory.

    Examples:
    - Fetch after a jump past the last word
    - MOV load/store with an address beyond the configured memory size
    """

    def __init__(
        self,
        address: int,
        region: str = "memory",
        pc: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        details = details or {}
        details["address"] = address
        message = f"Address {address} is outside {region}"
        super().__init__(message=message, pc=pc, details=details)
        self.address = address
        self.region = region


class DivisionByZeroFault(MachineFault):
    """Raised by DIV when the divisor is zero."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__(message="Division by zero", pc=pc)


class StackOverflowFault(MachineFault):
    """Raised by CALL when the call stack is full."""

    def __init__(self, capacity: int, pc: Optional[int] = None):
        super().__init__(
            message=f"Stack overflow (capacity {capacity})",
            pc=pc,
            details={"capacity": capacity},
        )
        self.capacity = capacity


class StackUnderflowFault(MachineFault):
    """Raised by RET when the call stack is empty."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__(message="Stack underflow", pc=pc)


class DecodeFault(MachineFault):
    """Raised when a word does not decode to a valid instruction.

    Examples:
    - Unassigned opcode 0x0
    - Register field naming a register that does not exist
    - Memory destination flag on an opcode other than MOV
    """

    def __init__(
        self,
        word: int,
        reason: str,
        pc: Optional[int] = None,
    ):
        message = f"Cannot decode word 0x{word:04X}: {reason}"
        super().__init__(message=message, pc=pc, details={"word": f"0x{word:04X}"})
        self.word = word
        self.reason = reason
