"""
Pytest configuration and shared fixtures for the vcpu16 test suite.
"""

import sys
import tempfile
from pathlib import Path

import pytest
import yaml

# Ensure project root is on PYTHONPATH so 'vcpu16' can be imported
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from vcpu16.assembler import assemble  # noqa: E402
from vcpu16.core.builders import create_machine  # noqa: E402
from vcpu16.core.simulation_engine import SimulationEngine  # noqa: E402
from vcpu16.utils.config_loader import clear_config_cache  # noqa: E402

# Cap for programs that are expected to halt; a hang becomes a "limit" stop.
DEFAULT_STEP_CAP = 100_000


@pytest.fixture
def temp_yaml_file():
    """
    Fixture that provides a temporary YAML file.

    Yields:
        Path: Path to the temporary YAML file
    """
    with tempfile.NamedTemporaryFile(
        mode="w",
        suffix=".yaml",
        delete=False,
    ) as f:
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    if temp_path.exists():
        temp_path.unlink()


MACHINE_CFG = {
    "memory_size": 1024,
    "stack_size": 256,
}

ASSEMBLER_CFG = {
    "comment_marker": ";",
    "memory_sigil": "$",
    "source_extension": ".asmy",
}


@pytest.fixture
def valid_config_dict():
    """
    Fixture providing a complete valid configuration dictionary.
    """
    return {
        "machine": dict(MACHINE_CFG),
        "assembler": dict(ASSEMBLER_CFG),
    }


@pytest.fixture
def temp_config_yaml_file(temp_yaml_file, valid_config_dict):
    """
    Fixture that creates a temporary YAML file with valid configuration.

    Yields:
        Path: Path to the temporary YAML file with valid configuration
    """
    with open(temp_yaml_file, "w", encoding="utf-8") as f:
        yaml.dump(valid_config_dict, f)

    yield temp_yaml_file


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def run_source():
    """
    Fixture returning a helper that assembles, loads and runs source text.

    The helper returns ``(cpu, stop_reason)``. ``max_steps`` caps the run in
    the harness; the machine itself has no limit.
    """

    def _run(source: str, max_steps: int = DEFAULT_STEP_CAP, machine_config=None):
        cpu = create_machine(assemble(source), machine_config)
        stop = SimulationEngine().run(cpu, max_steps=max_steps)
        return cpu, stop

    return _run


def pytest_configure(config):
    """
    Hook for initial pytest configuration.

    Used to add custom markers and configuration.
    """
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests",
    )
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
