"""Tests for rmtscore.engine.pipeline — batch scoring over the creator roster."""

from __future__ import annotations

import json
from dataclasses import asdict

import pytest

from helpers import BASE_DATE, make_hit, make_miss, month_tips
from rmtscore.engine.models import CreatorTier
from rmtscore.engine.pipeline import PipelineResult, RunTracker, run_scoring_pipeline
from rmtscore.engine.scorer import calculate_composite_score
from rmtscore.storage.queries import (
    get_creator_by_slug,
    get_creator_score,
    get_score_history,
    get_scoring_run,
    insert_tips,
    upsert_creator,
)


def _records(tips) -> list[dict]:
    return [dict(asdict(t), id=f"tip-{i}") for i, t in enumerate(tips)]


@pytest.fixture
def histories():
    return {
        "alpha": [make_hit(days_ago=d) for d in range(18)] + [make_miss(days_ago=d) for d in (18, 19)],
        "bravo": month_tips(2025, 4, 1, 2) + month_tips(2025, 5, 2, 1) + month_tips(2025, 6, 0, 3),
        "charlie": [make_miss(days_ago=3)],
    }


@pytest.fixture
def seeded_db(memory_db, histories):
    for slug, tips in histories.items():
        creator_id = upsert_creator(memory_db, slug)
        insert_tips(memory_db, creator_id, _records(tips))
    upsert_creator(memory_db, "empty")
    return memory_db


class TestPipeline:
    def test_scores_every_creator_with_tips(self, default_config, seeded_db):
        result = run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)
        assert set(result.scores) == {"alpha", "bravo", "charlie"}
        assert result.tracker.creators_scored == 3
        assert result.tracker.creators_skipped == 1
        assert result.tracker.creators_failed == 0
        assert result.now == BASE_DATE

    def test_matches_direct_call(self, default_config, seeded_db, histories):
        result = run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)
        for slug, tips in histories.items():
            direct = calculate_composite_score(tips, now=BASE_DATE)
            assert result.scores[slug].rmt_score == pytest.approx(direct.rmt_score)
            assert result.scores[slug].tier is direct.tier

    def test_shared_now(self, default_config, seeded_db):
        result = run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)
        assert {r.calculated_at for r in result.scores.values()} == {BASE_DATE}

    def test_persists_scores_snapshots_and_tiers(self, default_config, seeded_db):
        result = run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)

        alpha = get_creator_by_slug(seeded_db, "alpha")
        assert alpha["tier"] == CreatorTier.BRONZE.value
        assert alpha["completed_tips"] == 20

        row = get_creator_score(seeded_db, alpha["id"])
        assert row["rmt_score"] == pytest.approx(result.scores["alpha"].rmt_score)
        assert row["run_id"] == result.run_id

        history = get_score_history(seeded_db, alpha["id"])
        assert [h["date"] for h in history] == ["2025-07-15"]

        run = get_scoring_run(seeded_db, result.run_id)
        assert run["status"] == "completed"
        assert run["creators_scored"] == 3
        assert run["creators_skipped"] == 1
        assert run["completed_at"] is not None

    def test_rerun_same_day_replaces_snapshot(self, default_config, seeded_db):
        run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)
        run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)
        alpha = get_creator_by_slug(seeded_db, "alpha")
        assert len(get_score_history(seeded_db, alpha["id"])) == 1

    def test_dry_run_writes_nothing(self, default_config, seeded_db):
        result = run_scoring_pipeline(default_config, seeded_db, dry_run=True, now=BASE_DATE)
        assert result.dry_run
        assert result.n_scored == 3
        assert seeded_db.fetchone("SELECT COUNT(*) AS n FROM creator_scores")["n"] == 0
        assert seeded_db.fetchone("SELECT COUNT(*) AS n FROM scoring_runs")["n"] == 0
        assert get_creator_by_slug(seeded_db, "alpha")["tier"] == "UNRATED"

    def test_creator_filter(self, default_config, seeded_db):
        result = run_scoring_pipeline(
            default_config, seeded_db, creator_filter="bravo", now=BASE_DATE,
        )
        assert list(result.scores) == ["bravo"]

    def test_unknown_creator(self, default_config, seeded_db):
        result = run_scoring_pipeline(
            default_config, seeded_db, creator_filter="nobody", now=BASE_DATE,
        )
        assert result.n_scored == 0
        assert result.tracker.errors == []

    def test_empty_roster(self, default_config, memory_db):
        result = run_scoring_pipeline(default_config, memory_db, now=BASE_DATE)
        assert result.n_scored == 0
        assert result.leaderboard == []

    def test_leaderboard_order(self, default_config, seeded_db):
        result = run_scoring_pipeline(default_config, seeded_db, dry_run=True, now=BASE_DATE)
        values = [v for _, v in result.leaderboard]
        assert values == sorted(values, reverse=True)
        assert result.leaderboard[0][0] == "alpha"

    def test_single_worker(self, test_config, seeded_db):
        config = test_config.model_copy(update={"pipeline": test_config.pipeline.model_copy(
            update={"max_workers": 1},
        )})
        result = run_scoring_pipeline(config, seeded_db, now=BASE_DATE)
        assert result.n_scored == 3


class TestFailureIsolation:
    def test_one_creator_fails(self, default_config, seeded_db, monkeypatch):
        real = calculate_composite_score

        def flaky(tips, *args, **kwargs):
            if len(tips) == 1:
                raise RuntimeError("boom")
            return real(tips, *args, **kwargs)

        monkeypatch.setattr("rmtscore.engine.pipeline.calculate_composite_score", flaky)
        result = run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)

        assert set(result.scores) == {"alpha", "bravo"}
        assert result.tracker.creators_failed == 1
        assert result.tracker.errors == ["charlie: boom"]

        run = get_scoring_run(seeded_db, result.run_id)
        assert run["status"] == "completed_with_errors"
        assert json.loads(run["errors"]) == ["charlie: boom"]
        charlie = get_creator_by_slug(seeded_db, "charlie")
        assert get_creator_score(seeded_db, charlie["id"]) is None

    def test_persistence_failure_isolated(self, default_config, seeded_db, monkeypatch):
        from rmtscore.engine import pipeline

        real = pipeline.upsert_score_snapshot

        def failing(db, creator_id, result, snapshot_date, **kwargs):
            if result.total_scored_tips == 1:
                raise RuntimeError("disk full")
            return real(db, creator_id, result, snapshot_date, **kwargs)

        monkeypatch.setattr(pipeline, "upsert_score_snapshot", failing)
        result = run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)
        assert result.tracker.creators_failed == 1
        assert "charlie: persistence: disk full" in result.tracker.errors
        alpha = get_creator_by_slug(seeded_db, "alpha")
        assert len(get_score_history(seeded_db, alpha["id"])) == 1

        # The score written before the failed snapshot is rolled back too
        charlie = get_creator_by_slug(seeded_db, "charlie")
        assert get_creator_score(seeded_db, charlie["id"]) is None
        assert get_score_history(seeded_db, charlie["id"]) == []
        assert charlie["tier"] == CreatorTier.UNRATED.value
        assert charlie["completed_tips"] == 0

    def test_failed_tier_update_keeps_previous_score(self, default_config, seeded_db, monkeypatch):
        from rmtscore.engine import pipeline

        first = run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)
        charlie = get_creator_by_slug(seeded_db, "charlie")

        def failing(*args, **kwargs):
            raise RuntimeError("locked")

        monkeypatch.setattr(pipeline, "update_creator_tier", failing)
        second = run_scoring_pipeline(default_config, seeded_db, now=BASE_DATE)
        assert second.tracker.creators_failed == 3

        row = get_creator_score(seeded_db, charlie["id"])
        assert row["run_id"] == first.run_id


class TestRunObjects:
    def test_tracker_to_dict(self):
        tracker = RunTracker(run_id="abc")
        data = tracker.to_dict()
        assert data["run_id"] == "abc"
        assert data["creators_scored"] == 0
        assert isinstance(data["started_at"], str)

    def test_run_ids_unique(self):
        assert RunTracker().run_id != RunTracker().run_id

    def test_empty_result(self):
        result = PipelineResult()
        assert result.n_scored == 0
        assert result.leaderboard == []
