import csv
import json

import pytest

from beeswarm.app.headless import run_headless
from beeswarm.config import SwarmConfig
from beeswarm.sim.core.flock import Flock


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_log_header_and_rows(tmp_path):
    log_path = tmp_path / "frames.csv"
    run_headless(frames=5, seed=1, log_path=log_path, deterministic_log=True)
    rows = _read_csv(log_path)
    # the start tick plus one row per frame
    assert len(rows) == 7
    assert rows[0] == [
        "tick",
        "time_ms",
        "running",
        "phase",
        "target_x",
        "target_y",
        "population",
        "wraps",
        "separating",
        "avg_turn",
        "avg_neighbor_distance",
        "tick_ms",
    ]
    header = rows[0]
    idx = {name: i for i, name in enumerate(header)}
    first = rows[1]
    assert int(first[idx["tick"]]) == 1
    assert [int(row[idx["tick"]]) for row in rows[1:]] == list(range(1, 7))
    assert int(first[idx["population"]]) == SwarmConfig().population.count
    assert first[idx["phase"]] == "home"
    assert float(first[idx["tick_ms"]]) == 0.0


def test_headless_is_deterministic_for_a_seed(tmp_path):
    path_a = tmp_path / "a.csv"
    path_b = tmp_path / "b.csv"
    run_headless(frames=30, seed=7, log_path=path_a, deterministic_log=True)
    run_headless(frames=30, seed=7, log_path=path_b, deterministic_log=True)
    assert path_a.read_text() == path_b.read_text()


def test_headless_summary_output(tmp_path):
    summary_path = tmp_path / "summary.json"
    config = SwarmConfig()
    config.oscillation.fixed_duration_ms = 100
    flock = run_headless(frames=40, seed=3, log_path=None, summary_path=summary_path, config=config)
    payload = json.loads(summary_path.read_text())
    assert payload["frames"] == 40
    assert payload["ticks"] == 41
    assert payload["recorded_ticks"] == 41
    assert payload["seed"] == 3
    assert payload["scatter_policy"] == "origin"
    assert payload["completed"] is True
    assert payload["phase_changes"] >= 4
    for key in ["tick_ms", "average_turn", "average_neighbor_distance"]:
        assert set(payload[key]) == {"min", "max", "avg", "p50", "p90", "p99"}
    assert not flock.running


def test_headless_seed_override_leaves_config_untouched(tmp_path):
    config = SwarmConfig(seed=99)
    summary_path = tmp_path / "summary.json"
    run_headless(frames=3, seed=5, log_path=None, summary_path=summary_path, config=config)
    assert config.seed == 99
    assert json.loads(summary_path.read_text())["seed"] == 5


def test_headless_closes_log_when_the_run_fails(tmp_path, monkeypatch):
    log_path = tmp_path / "frames.csv"
    handles = []
    original_open = type(log_path).open

    def tracking_open(self, *args, **kwargs):
        handle = original_open(self, *args, **kwargs)
        handles.append(handle)
        return handle

    def broken_start(self):
        raise RuntimeError("no frames today")

    monkeypatch.setattr(type(log_path), "open", tracking_open)
    monkeypatch.setattr(Flock, "start", broken_start)
    with pytest.raises(RuntimeError):
        run_headless(frames=3, seed=1, log_path=log_path)
    assert len(handles) == 1
    assert handles[0].closed
