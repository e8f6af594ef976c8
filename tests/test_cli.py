"""Tests for the rmtscore CLI, driven through click's CliRunner."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
import yaml
from click.testing import CliRunner

from rmtscore.cli.main import cli


def _parse_json(output: str) -> dict:
    start = output.index("{")
    data, _ = json.JSONDecoder().raw_decode(output[start:])
    return data


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "database": {"path": str(tmp_path / "rmt.db")},
        "output": {"score_history_dir": str(tmp_path / "history")},
        "pipeline": {"max_workers": 2},
    }))
    return path


@pytest.fixture
def tips_csv(tmp_path):
    now = datetime.now(timezone.utc).replace(microsecond=0)
    rows = ["creator,id,direction,entry_price,target1,stop_loss,timeframe,status,tip_timestamp,closed_at"]
    for i in range(6):
        closed = now - timedelta(days=i + 1)
        opened = closed - timedelta(days=2)
        status = "STOPLOSS_HIT" if i == 5 else "TARGET_1_HIT"
        rows.append(
            f"alpha,a{i},BUY,100,110,95,SWING,{status},{opened.isoformat()},{closed.isoformat()}"
        )
    rows.append(
        f"alpha,open1,BUY,100,110,95,SWING,ACTIVE,{now.isoformat()},{now.isoformat()}"
    )
    path = tmp_path / "tips.csv"
    path.write_text("\n".join(rows) + "\n")
    return path


def _invoke(runner, config_file, *args):
    return runner.invoke(cli, ["--config", str(config_file), *args])


class TestTopLevel:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("init", "config", "creator", "import", "score", "history"):
            assert name in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "rmtscore" in result.output

    def test_init(self, config_file, tmp_path):
        result = _invoke(CliRunner(), config_file, "init")
        assert result.exit_code == 0, result.output
        assert "Schema version: 1" in result.output
        assert (tmp_path / "rmt.db").exists()
        assert (tmp_path / "history").is_dir()


class TestConfigCommands:
    def test_show(self, config_file, tmp_path):
        result = _invoke(CliRunner(), config_file, "config", "show")
        assert result.exit_code == 0
        shown = yaml.safe_load(result.stdout[result.stdout.index("version"):])
        assert shown["database"]["path"] == str(tmp_path / "rmt.db")
        assert shown["scoring"]["risk_adjusted"]["blend"]["return"] == 0.5

    def test_validate_ok(self, config_file):
        result = _invoke(CliRunner(), config_file, "config", "validate")
        assert result.exit_code == 0
        assert "Config is valid." in result.output
        assert "Scoring: published defaults" in result.output

    def test_validate_bad_weights(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"scoring": {"weights": {"accuracy": 0.9}}}))
        result = CliRunner().invoke(cli, ["--config", str(path), "config", "validate"])
        assert result.exit_code == 1


class TestCreatorCommands:
    def test_add_and_list(self, config_file):
        runner = CliRunner()
        result = _invoke(runner, config_file, "creator", "add", "Alpha", "--name", "Alpha Trades")
        assert result.exit_code == 0
        assert "Registered alpha." in result.output

        result = _invoke(runner, config_file, "creator", "add", "alpha")
        assert "Updated alpha." in result.output

        result = _invoke(runner, config_file, "creator", "list")
        assert result.exit_code == 0
        assert "alpha" in result.output
        assert "1 creator(s)" in result.output

    def test_list_empty(self, config_file):
        result = _invoke(CliRunner(), config_file, "creator", "list")
        assert "No creators registered." in result.output


class TestImportAndScore:
    def test_import_reports_rejections(self, config_file, tips_csv):
        result = _invoke(CliRunner(), config_file, "import", "tips", str(tips_csv))
        assert result.exit_code == 0, result.output
        assert "Imported 6 tips for 1 creator(s)" in result.output
        assert "Rejected 1 row(s)" in result.output
        assert "ACTIVE" in result.output

    def test_import_missing_columns(self, config_file, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("creator,direction\nalpha,BUY\n")
        result = _invoke(CliRunner(), config_file, "import", "tips", str(path))
        assert result.exit_code == 1

    def test_score_json(self, config_file, tips_csv, tmp_path):
        runner = CliRunner()
        _invoke(runner, config_file, "import", "tips", str(tips_csv))
        result = _invoke(runner, config_file, "score", "--json")
        assert result.exit_code == 0, result.output

        payload = _parse_json(result.stdout)
        alpha = payload["scores"]["alpha"]
        assert alpha["total_scored_tips"] == 6
        assert alpha["accuracy_rate"] == pytest.approx(5 / 6)
        assert alpha["tier"] == "UNRATED"
        assert payload["run"]["creators_scored"] == 1
        assert list((tmp_path / "history").glob("rmt_scores_*.json"))

    def test_score_table_and_history(self, config_file, tips_csv):
        runner = CliRunner()
        _invoke(runner, config_file, "import", "tips", str(tips_csv))
        result = _invoke(runner, config_file, "score", "--detail")
        assert result.exit_code == 0, result.output
        assert "Scored: 1 creator(s)" in result.output
        assert "Risk-adjusted" in result.output

        result = _invoke(runner, config_file, "history", "alpha")
        assert result.exit_code == 0, result.output
        assert "alpha: RMT" in result.output
        assert "[UNRATED]" in result.output

    def test_score_dry_run_writes_no_history(self, config_file, tips_csv, tmp_path):
        runner = CliRunner()
        _invoke(runner, config_file, "import", "tips", str(tips_csv))
        result = _invoke(runner, config_file, "score", "--dry-run")
        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert not list((tmp_path / "history").glob("rmt_scores_*.json"))

        result = _invoke(runner, config_file, "history", "alpha")
        assert "No score history." in result.output

    def test_history_unknown_creator(self, config_file):
        result = _invoke(CliRunner(), config_file, "history", "nobody")
        assert result.exit_code == 1
