import pytest

from vcpu16.core.exceptions import (
    AddressFault,
    AssemblyError,
    ConfigurationError,
    DecodeFault,
    DivisionByZeroFault,
    ImageFormatError,
    MachineFault,
    StackOverflowFault,
    StackUnderflowFault,
    Vcpu16Error,
)


class TestVcpu16Error:
    """Test Vcpu16Error base exception class."""

    def test_creation_basic(self):
        exc = Vcpu16Error("Test error message")

        assert str(exc) == "Test error message"
        assert exc.details == {}

    def test_with_details(self):
        details = {"key1": "value1", "key2": 42}
        exc = Vcpu16Error("boom", details=details)

        assert exc.details == details

    def test_inheritance(self):
        assert isinstance(Vcpu16Error("test"), Exception)


class TestConfigurationError:
    """Test ConfigurationError exception class."""

    def test_with_key_and_message(self):
        exc = ConfigurationError(config_key="machine.memory_size", message="must be positive")

        assert exc.config_key == "machine.memory_size"
        assert str(exc) == "Configuration error for 'machine.memory_size': must be positive"

    def test_single_argument_is_the_message(self):
        exc = ConfigurationError("Top level of config must be a mapping")

        assert exc.config_key == "configuration"
        assert "Top level of config must be a mapping" in str(exc)

    def test_no_arguments(self):
        exc = ConfigurationError()
        assert "Invalid configuration" in str(exc)

    def test_is_vcpu16_error(self):
        with pytest.raises(Vcpu16Error):
            raise ConfigurationError("x")


class TestAssemblyError:
    def test_line_number_prefix(self):
        exc = AssemblyError("Unknown instruction 'FOO'", line_number=3, line="FOO R0")

        assert str(exc) == "Line 3: Unknown instruction 'FOO'"
        assert exc.line_number == 3
        assert exc.line == "FOO R0"
        assert exc.details["line"] == "FOO R0"

    def test_without_line_number(self):
        exc = AssemblyError("Invalid operand 'x'")

        assert str(exc) == "Invalid operand 'x'"
        assert exc.line_number is None


class TestMachineFaults:
    @pytest.mark.parametrize(
        "fault",
        [
            AddressFault(2000),
            DivisionByZeroFault(),
            StackOverflowFault(256),
            StackUnderflowFault(),
            DecodeFault(0x0000, "unknown opcode 0x0"),
        ],
    )
    def test_all_faults_share_a_base(self, fault):
        assert isinstance(fault, MachineFault)
        assert isinstance(fault, Vcpu16Error)
        assert fault.pc is None

    def test_address_fault_message(self):
        exc = AddressFault(1024, "memory (program counter)", pc=1024)

        assert str(exc) == "Address 1024 is outside memory (program counter)"
        assert exc.details["address"] == 1024
        assert exc.region == "memory (program counter)"
        assert exc.pc == 1024

    def test_decode_fault_message(self):
        exc = DecodeFault(0x2800, "ADD has no direct memory operand", pc=4)

        assert str(exc) == "Cannot decode word 0x2800: ADD has no direct memory operand"
        assert exc.details == {"word": "0x2800"}
        assert exc.reason == "ADD has no direct memory operand"

    def test_stack_fault_messages(self):
        assert str(StackOverflowFault(4)) == "Stack overflow (capacity 4)"
        assert str(StackUnderflowFault()) == "Stack underflow"
        assert str(DivisionByZeroFault(pc=3)) == "Division by zero"

    def test_image_format_error_is_not_a_fault(self):
        assert not issubclass(ImageFormatError, MachineFault)
        assert issubclass(ImageFormatError, Vcpu16Error)
