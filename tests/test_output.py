"""Tests for rmtscore.output.report — terminal lines and history files."""

from __future__ import annotations

import json

import click

from helpers import BASE_DATE, make_hit, make_miss
from rmtscore.engine.scorer import calculate_composite_score
from rmtscore.output.report import (
    format_score_detail,
    format_score_line,
    load_latest_score_history,
    save_score_history,
)


def _plain(text: str) -> str:
    return click.unstyle(text)


class TestFormatting:
    def test_line_shows_score(self, eighteen_and_two):
        result = calculate_composite_score(eighteen_and_two, now=BASE_DATE)
        line = _plain(format_score_line("alpha", result))
        assert "alpha" in line
        assert f"{result.rmt_score:.1f}" in line
        assert "BRONZE" in line
        assert "20 tips" in line

    def test_line_hidden_below_minimum(self):
        result = calculate_composite_score([make_hit(), make_miss(days_ago=1)], now=BASE_DATE)
        line = _plain(format_score_line("newbie", result))
        assert "(hidden)" in line
        assert f"{result.rmt_score:.1f}" not in line

    def test_custom_minimum(self):
        result = calculate_composite_score([make_hit()], now=BASE_DATE)
        assert "(hidden)" not in _plain(format_score_line("x", result, min_tips_for_display=1))

    def test_detail_breakdown(self, eighteen_and_two):
        result = calculate_composite_score(eighteen_and_two, now=BASE_DATE)
        text = _plain(format_score_detail("alpha", result))
        assert "Accuracy" in text
        assert "18 win(s)" in text
        assert "SWING=90.0%" in text
        assert "INTRADAY=n/a" in text
        assert "2025-07-15" in text

    def test_detail_empty_history(self):
        result = calculate_composite_score([], now=BASE_DATE)
        text = _plain(format_score_detail("ghost", result))
        assert "n/a / n/a" in text
        assert "Streak" not in text


class TestScoreHistory:
    def test_save_and_load(self, tmp_path, eighteen_and_two):
        result = calculate_composite_score(eighteen_and_two, now=BASE_DATE)
        path = save_score_history({"alpha": result}, tmp_path, now=BASE_DATE)
        assert path.name == "rmt_scores_2025-07-15.json"

        data = json.loads(path.read_text())
        assert data["_metadata"]["creators"] == 1
        assert data["_metadata"]["scored_at"] == BASE_DATE.isoformat()
        assert data["scores"]["alpha"]["tier"] == "BRONZE"

        latest = load_latest_score_history(tmp_path)
        assert latest["alpha"]["rmt_score"] == result.rmt_score

    def test_run_metadata(self, tmp_path):
        result = calculate_composite_score([make_hit()], now=BASE_DATE)
        path = save_score_history({"a": result}, tmp_path, now=BASE_DATE, run_metadata={"run_id": "r1"})
        assert json.loads(path.read_text())["run_metadata"] == {"run_id": "r1"}

    def test_latest_wins(self, tmp_path):
        old = calculate_composite_score([make_miss()], now=BASE_DATE)
        new = calculate_composite_score([make_hit()], now=BASE_DATE)
        save_score_history({"a": old}, tmp_path, now=BASE_DATE.replace(day=1))
        save_score_history({"a": new}, tmp_path, now=BASE_DATE)
        assert load_latest_score_history(tmp_path)["a"]["accuracy_rate"] == 1.0

    def test_missing_dir(self, tmp_path):
        assert load_latest_score_history(tmp_path / "none") == {}

    def test_corrupt_file(self, tmp_path):
        (tmp_path / "rmt_scores_2025-07-15.json").write_text("{not json")
        assert load_latest_score_history(tmp_path) == {}
