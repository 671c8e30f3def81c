"""Load settlement definitions from TOML files."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from domain.config_base import BaseConfig, load_config_dir, load_config_file
from domain.scoring.calculator import ScoringParameters

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "settlement"


@dataclass(frozen=True)
class SettlementParameters:
    propagation_chunk_size: int = 500
    spawn_max_attempts: int = 5
    playing_xi_bonus: float = 0.0


@dataclass(frozen=True)
class SettlementConfig(BaseConfig):
    """Scoring and settlement tuning for one deployment."""

    scoring: ScoringParameters = ScoringParameters()
    settlement: SettlementParameters = SettlementParameters()

    def as_config_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "scoring": asdict(self.scoring),
            "settlement": asdict(self.settlement),
        }


def load_settlement_config(file_path: Path) -> SettlementConfig:
    """Load and validate one settlement TOML config file."""
    return load_config_file(file_path, _parse_settlement_config)


def load_settlement_configs(config_dir: Path = DEFAULT_CONFIG_DIR) -> list[SettlementConfig]:
    """Load and validate all settlement TOML config files in a directory."""
    return load_config_dir(config_dir, _parse_settlement_config, label="settlement")


def _parse_settlement_config(raw: dict[str, Any], file_path: Path) -> SettlementConfig:
    system_raw = raw.get("system", {})
    scoring_raw = raw.get("scoring", {})
    settlement_raw = raw.get("settlement", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    scoring_fields = {field.name for field in fields(ScoringParameters)}
    unknown = sorted(set(scoring_raw) - scoring_fields)
    if unknown:
        raise ValueError(f"{file_path}: unknown [scoring] keys: {unknown}")

    defaults = ScoringParameters()
    scoring = ScoringParameters(
        **{
            field_name: float(scoring_raw.get(field_name, getattr(defaults, field_name)))
            for field_name in scoring_fields
        }
    )
    _validate_scoring(file_path=file_path, parameters=scoring)

    settlement = SettlementParameters(
        propagation_chunk_size=int(settlement_raw.get("propagation_chunk_size", 500)),
        spawn_max_attempts=int(settlement_raw.get("spawn_max_attempts", 5)),
        playing_xi_bonus=float(settlement_raw.get("playing_xi_bonus", 0.0)),
    )
    _validate_settlement(file_path=file_path, parameters=settlement)

    return SettlementConfig(
        name=name,
        description=description,
        file_path=file_path,
        scoring=scoring,
        settlement=settlement,
    )


def _validate_scoring(*, file_path: Path, parameters: ScoringParameters) -> None:
    for field in fields(ScoringParameters):
        value = getattr(parameters, field.name)
        if not math.isfinite(value):
            raise ValueError(f"{file_path}: [scoring].{field.name} must be a finite number")
        if value < 0.0:
            raise ValueError(f"{file_path}: [scoring].{field.name} must be >= 0")


def _validate_settlement(*, file_path: Path, parameters: SettlementParameters) -> None:
    if parameters.propagation_chunk_size <= 0:
        raise ValueError(f"{file_path}: [settlement].propagation_chunk_size must be > 0")
    if parameters.spawn_max_attempts <= 0:
        raise ValueError(f"{file_path}: [settlement].spawn_max_attempts must be > 0")
    if not math.isfinite(parameters.playing_xi_bonus) or parameters.playing_xi_bonus < 0.0:
        raise ValueError(f"{file_path}: [settlement].playing_xi_bonus must be >= 0")


__all__ = [
    "DEFAULT_CONFIG_DIR",
    "SettlementConfig",
    "SettlementParameters",
    "load_settlement_config",
    "load_settlement_configs",
]
