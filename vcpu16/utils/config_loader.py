"""Helpers for loading and validating vcpu16 configuration."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
import threading

import yaml  # type: ignore[import-untyped]

from vcpu16.core.exceptions import ConfigurationError

# JMP/CALL carry a 12-bit target; a larger memory could not be reached.
MAX_MEMORY_SIZE = 1 << 12


@dataclass(frozen=True)
class MachineConfig:
    memory_size: int = 1024
    stack_size: int = 256


@dataclass(frozen=True)
class AssemblerConfig:
    comment_marker: str = ";"
    memory_sigil: str = "$"
    source_extension: str = ".asmy"


@dataclass(frozen=True)
class Vcpu16Config:
    machine: MachineConfig = field(default_factory=MachineConfig)
    assembler: AssemblerConfig = field(default_factory=AssemblerConfig)


# Configuration cache with thread safety
_LOADER_CACHE: dict[str, Vcpu16Config] = {}
_CACHE_LOCK = threading.RLock()


def _get_config_path(path: Optional[str] = None) -> str:
    if path is None:
        # Bundled defaults live next to the package: vcpu16/config.yaml
        base = Path(__file__).parent.parent / "config.yaml"
        path = str(base)

    return path


def _load_yaml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except Exception as exc:
        raise ConfigurationError(f"Failed to parse config: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("Top level of config must be a mapping")
    return raw


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(config_key=name, message="section must be a mapping")
    return section


def _parse_config_from_dict(raw: dict[str, Any]) -> Vcpu16Config:
    machine_raw = _section(raw, "machine")
    assembler_raw = _section(raw, "assembler")

    try:
        cfg = Vcpu16Config(
            machine=MachineConfig(**machine_raw),
            assembler=AssemblerConfig(**assembler_raw),
        )
    except TypeError as exc:
        raise ConfigurationError(f"Invalid config schema: {exc}") from exc

    _validate_machine_config(cfg.machine)
    _validate_assembler_config(cfg.assembler)
    return cfg


def _validate_machine_config(machine: MachineConfig) -> None:
    """Basic sanity checks for machine sizes to fail fast on bad configs."""
    for key in ("memory_size", "stack_size"):
        value = getattr(machine, key)
        # bool is an int subclass; "memory_size: yes" is a typo, not a size
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigurationError(
                config_key=f"machine.{key}", message="must be an integer"
            )
        if value <= 0:
            raise ConfigurationError(
                config_key=f"machine.{key}", message="must be positive"
            )

    if machine.memory_size > MAX_MEMORY_SIZE:
        raise ConfigurationError(
            config_key="machine.memory_size",
            message=f"must not exceed {MAX_MEMORY_SIZE} words",
            details={"provided": machine.memory_size, "max": MAX_MEMORY_SIZE},
        )


def _validate_assembler_config(assembler: AssemblerConfig) -> None:
    for key in ("comment_marker", "memory_sigil"):
        value = getattr(assembler, key)
        if not isinstance(value, str) or len(value) != 1 or value.isspace():
            raise ConfigurationError(
                config_key=f"assembler.{key}",
                message="must be a single non-blank character",
            )

    if assembler.comment_marker == assembler.memory_sigil:
        raise ConfigurationError(
            config_key="assembler.memory_sigil",
            message="must differ from the comment marker",
        )

    ext = assembler.source_extension
    if not isinstance(ext, str) or not ext.startswith(".") or len(ext) < 2:
        raise ConfigurationError(
            config_key="assembler.source_extension",
            message="must look like '.asmy'",
        )


def load_config(path: Optional[str] = None) -> Vcpu16Config:
    """Load and validate configuration from a YAML file.

    Args:
        path: Optional path to YAML config. If None, load bundled vcpu16/config.yaml.

    Returns:
        Vcpu16Config instance

    Raises:
        ConfigurationError: on parse or validation errors
    """

    p = Path(_get_config_path(path=path))
    raw = _load_yaml_file(p)

    return _parse_config_from_dict(raw=raw)


def get_config(path: Optional[str] = None) -> Vcpu16Config:
    """Return the loaded config for path, loading and caching if necessary.

    Configs are cached per resolved path; repeated calls return the cached
    instance without re-reading the YAML file.

    THREAD SAFETY: This function is thread-safe.
    """
    key = _get_config_path(path=path)
    with _CACHE_LOCK:
        if key not in _LOADER_CACHE:
            _LOADER_CACHE[key] = load_config(path=path)
        return _LOADER_CACHE[key]


def clear_config_cache() -> None:
    """Clear all cached configurations.

    All subsequent calls to get_config() will reload from disk.
    """
    with _CACHE_LOCK:
        _LOADER_CACHE.clear()
