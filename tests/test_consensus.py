"""Tests for the majority vote and announcement debounce."""

from __future__ import annotations

from busreader.config import ConsensusConfig
from busreader.consensus import AnnouncementState, ConsensusEngine, select_winner


def _engine_with(readings: list[str], **config) -> ConsensusEngine:
    engine = ConsensusEngine(ConsensusConfig(**config))
    for reading in readings:
        engine.ingest(reading)
    return engine


def _collect_announcements(engine: ConsensusEngine, times: list[float]) -> list[tuple[float, str]]:
    announced: list[tuple[float, str]] = []
    for now in times:
        winner = engine.evaluate(now)
        if winner is not None:
            announced.append((now, winner))
    return announced


def test_non_empty_majority_wins() -> None:
    engine = _engine_with(["12", "12", "", "12", "45", "12", "12", "", "12", "12"])
    assert engine.evaluate(0.0) == "12"


def test_repeated_reading_wins_when_nothing_seen_dominates() -> None:
    engine = _engine_with(["", "", "", "A1", "A1", "A1", "", "", "", ""])
    assert engine.evaluate(0.0) == "A1"


def test_sparse_reading_below_min_repeats_is_not_announced() -> None:
    engine = _engine_with(["", "", "", "A1", "A1", "", "", "", "", ""])
    assert engine.evaluate(0.0) is None


def test_only_empty_readings_yield_nothing() -> None:
    engine = _engine_with([""] * 10)
    assert engine.evaluate(0.0) is None


def test_empty_history_yields_nothing() -> None:
    engine = ConsensusEngine()
    assert engine.evaluate(0.0) is None
    assert engine.state_name == "idle"


def test_ties_go_to_the_first_reading_seen() -> None:
    assert select_winner(["7", "9", "9", "7"], min_repeats=3) == "7"
    assert select_winner(["", "", "", "", "B", "C", "C", "B", "B", "C"], min_repeats=3) == "B"


def test_history_keeps_only_the_latest_readings() -> None:
    engine = _engine_with(["old"] * 10 + ["new"] * 6)
    assert len(engine.history) == 10
    assert engine.history[:4] == ("old",) * 4
    assert engine.evaluate(0.0) == "new"


def test_empty_readings_dilute_a_stale_majority() -> None:
    engine = _engine_with(["12"] * 10)
    assert engine.evaluate(0.0) == "12"
    for _ in range(8):
        engine.ingest("")
    assert engine.evaluate(100.0) is None


def test_unchanged_winner_is_debounced_until_cooldown_passes() -> None:
    engine = _engine_with(["", "", "", "A1", "A1", "A1", "", "", "", ""])
    announced = _collect_announcements(engine, [0.0, 10.0, 16.0])
    assert announced == [(0.0, "A1"), (16.0, "A1")]


def test_cooldown_boundary_is_inclusive() -> None:
    engine = _engine_with(["5"] * 4)
    assert _collect_announcements(engine, [0.0, 14.9, 15.0]) == [(0.0, "5"), (15.0, "5")]


def test_new_winner_is_announced_immediately() -> None:
    engine = _engine_with(["12"] * 10)
    assert engine.evaluate(0.0) == "12"
    for _ in range(6):
        engine.ingest("34")
    assert engine.evaluate(1.0) == "34"
    assert engine.announcement_state == AnnouncementState(last_announced="34", last_announced_at=1.0)


def test_injected_clock_is_used_when_no_time_given() -> None:
    ticks = iter([3.0, 4.0])
    engine = ConsensusEngine(clock=lambda: next(ticks))
    engine.ingest("8")
    assert engine.evaluate() == "8"
    assert engine.announcement_state.last_announced_at == 3.0
    assert engine.evaluate() is None


def test_lifecycle_states() -> None:
    engine = ConsensusEngine()
    assert engine.state_name == "idle"
    engine.ingest("")
    assert engine.state_name == "accumulating"
    engine.evaluate(0.0)
    assert engine.state_name == "accumulating"
    engine.shutdown()
    assert engine.state_name == "stopped"
    assert engine.is_stopped


def test_stopped_engine_ignores_readings() -> None:
    engine = _engine_with(["12"] * 3)
    engine.shutdown()
    engine.ingest("34")
    assert engine.history == ("12", "12", "12")
    assert engine.evaluate(0.0) is None
    engine.shutdown()
