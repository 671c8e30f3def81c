"""TOML loading shared by settlement config files."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar
import tomllib


@dataclass(frozen=True)
class BaseConfig:
    """Identity of one config file: its [system] name and where it was read from."""

    name: str
    description: str | None
    file_path: Path

    def as_config_json(self) -> dict[str, Any]:
        raise NotImplementedError


ConfigT = TypeVar("ConfigT", bound=BaseConfig)
ConfigParser = Callable[[dict[str, Any], Path], ConfigT]


def read_toml(file_path: Path) -> dict[str, Any]:
    if not file_path.is_file():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    with file_path.open("rb") as file:
        return tomllib.load(file)


def load_config_file(file_path: Path, parser: ConfigParser[ConfigT]) -> ConfigT:
    """Read and parse one TOML config file."""
    return parser(read_toml(file_path), file_path)


def load_config_dir(
    config_dir: Path,
    parser: ConfigParser[ConfigT],
    *,
    label: str,
) -> list[ConfigT]:
    """Parse every ``*.toml`` in ``config_dir``; [system] names must be unique."""
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config directory not found: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    configs = [load_config_file(file_path, parser) for file_path in config_files]

    counts = Counter(config.name for config in configs)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        raise ValueError(f"Duplicate {label} config names found in {config_dir}: {duplicates}")
    return configs


def select_config(configs: list[ConfigT], file_name: str) -> ConfigT | None:
    """Pick a loaded config by its file name (for example ``default.toml``)."""
    return next((config for config in configs if config.file_path.name == file_name), None)


__all__ = [
    "BaseConfig",
    "load_config_dir",
    "load_config_file",
    "read_toml",
    "select_config",
]
