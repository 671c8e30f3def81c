"""Tests for the settlement operator CLI."""

from __future__ import annotations

import json
from pathlib import Path

from sqlalchemy import select
from typer.testing import CliRunner

from models import PlayerStat
from settle import app

runner = CliRunner()


def _write_config(config_dir: Path, playing_xi_bonus: float) -> None:
    config_dir.mkdir()
    (config_dir / "default.toml").write_text(
        f'[system]\nname = "cli"\n\n[settlement]\nplaying_xi_bonus = {playing_xi_bonus}\n'
    )


def _lineup(player_ids: range, role: str) -> list[dict[str, object]]:
    return [
        {"player_id": player_id, "role": role, "batting_order": index + 1}
        for index, player_id in enumerate(player_ids)
    ]


def test_register_xi_seeds_configured_selection_bonus(tmp_path: Path, session_factory, seed) -> None:
    match_id = seed.match()
    config_dir = tmp_path / "configs"
    _write_config(config_dir, playing_xi_bonus=4.0)
    lineup_file = tmp_path / "lineup.json"
    lineup_file.write_text(
        json.dumps({"team1": _lineup(range(1, 12), "batsman"), "team2": _lineup(range(101, 112), "bowler")})
    )

    result = runner.invoke(
        app,
        [
            "register-xi",
            str(match_id),
            str(lineup_file),
            "--db-url",
            f"sqlite:///{tmp_path / 'settlement.db'}",
            "--config-dir",
            str(config_dir),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "seeded_players=22 selection_bonus=4.0" in result.output
    with session_factory() as session:
        bonuses = session.scalars(
            select(PlayerStat.selection_bonus).where(PlayerStat.match_id == match_id)
        ).all()
        assert len(bonuses) == 22
        assert set(bonuses) == {4.0}


def test_register_xi_reports_settlement_errors(tmp_path: Path) -> None:
    config_dir = tmp_path / "configs"
    _write_config(config_dir, playing_xi_bonus=0.0)
    lineup_file = tmp_path / "lineup.json"
    lineup_file.write_text(json.dumps({"team1": [], "team2": []}))

    result = runner.invoke(
        app,
        [
            "register-xi",
            "1",
            str(lineup_file),
            "--db-url",
            f"sqlite:///{tmp_path / 'settlement.db'}",
            "--config-dir",
            str(config_dir),
        ],
    )

    assert result.exit_code == 1
    assert "error code=validation_error" in result.output
