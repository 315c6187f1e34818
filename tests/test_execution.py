"""Serial and parallel render backends."""

import numpy as np
import pandas as pd
import pytest

from mandelraster.computation import allocate_buffer, render
from mandelraster.config import default_render_config
from mandelraster.execution import run_render
from mandelraster.report import write_report
from mandelraster.scheduling import DynamicScheduler, StaticScheduler, chunk_rows


def _config(**overrides):
    base = dict(width=48, height=37, workers=3, chunk_size=5)
    base.update(overrides)
    return default_render_config(**base)


def _serial_pixels(config):
    pixels = allocate_buffer(config.bounds)
    render(pixels, config.bounds, config.region)
    return pixels


@pytest.mark.parametrize("schedule", ["serial", "static", "dynamic", "numba"])
def test_backends_match_serial_render(schedule):
    config = _config(schedule=schedule)
    report = run_render(config)
    np.testing.assert_array_equal(report.pixels, _serial_pixels(config))


@pytest.mark.parametrize("schedule", ["static", "dynamic"])
@pytest.mark.parametrize("workers,chunk_size", [(1, 37), (2, 1), (4, 10), (8, 100)])
def test_chunks_cover_every_row_once(schedule, workers, chunk_size):
    config = _config(schedule=schedule, workers=workers, chunk_size=chunk_size)
    report = run_render(config)

    frame = report.chunk_frame()
    assert list(frame["chunk_id"]) == list(range(config.total_chunks))
    covered = [row for start, end in zip(frame["start_row"], frame["end_row"]) for row in range(start, end)]
    assert covered == list(range(config.height))
    assert report.timing["total_chunks"] == config.total_chunks


def test_static_schedule_assigns_round_robin():
    config = _config(schedule="static", workers=3, chunk_size=5)
    report = run_render(config)
    for record in report.chunks:
        assert record["worker"] == record["chunk_id"] % 3


def test_timing_report_shape():
    report = run_render(_config(schedule="dynamic"))
    timing = report.timing
    assert timing["wall_time"] >= 0.0
    assert len(timing["worker_stats"]) == 3
    assert sum(stat["chunks"] for stat in timing["worker_stats"]) == timing["total_chunks"]


def test_invalid_config_raises_before_rendering():
    with pytest.raises(ValueError, match="schedule"):
        run_render(_config(schedule="mpi"))


def test_worker_errors_propagate(monkeypatch):
    from mandelraster import execution

    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(execution, "render_rows", broken)
    with pytest.raises(RuntimeError, match="boom"):
        run_render(_config(schedule="static"))


def test_write_report_csv(tmp_path):
    report = run_render(_config(schedule="static"))
    path = write_report(report, tmp_path / "reports" / "chunks.csv")
    frame = pd.read_csv(path)
    assert list(frame.columns) == ["worker", "chunk_id", "start_row", "end_row", "comp_time"]
    assert len(frame) == 8


def test_chunk_rows_clips_to_height():
    config = _config(height=12, chunk_size=5)
    assert config.total_chunks == 3
    assert chunk_rows(config, 0) == (0, 5)
    assert chunk_rows(config, 2) == (10, 12)
    assert chunk_rows(config, 3) == (15, 15)


def test_static_scheduler_assignments():
    scheduler = StaticScheduler(_config(height=30, chunk_size=5), 4)
    assert scheduler.chunks_for_worker(0) == [0, 4]
    assert scheduler.chunks_for_worker(3) == [3]
    assert scheduler.chunks_for_worker(9) == []


def test_dynamic_scheduler_exhausts():
    scheduler = DynamicScheduler(_config(height=12, chunk_size=5))
    assert [scheduler.request_chunk() for _ in range(4)] == [0, 1, 2, None]


def test_progress_lines_are_flushed(tmp_path, monkeypatch):
    import builtins

    from mandelraster.execution import run_single_render

    calls = []
    real_print = builtins.print

    def recording_print(*args, **kwargs):
        calls.append((" ".join(str(arg) for arg in args), kwargs.get("flush", False)))
        real_print(*args, **kwargs)

    monkeypatch.setattr(builtins, "print", recording_print)
    run_single_render(_config(output=str(tmp_path / "out.png"), schedule="static"), verbose=True)

    tagged = [(text, flushed) for text, flushed in calls if text.startswith("[")]
    assert {text.split("]")[0] + "]" for text, _ in tagged} >= {"[Run]", "[Image]", "[Timing]"}
    assert all(flushed for _, flushed in tagged)
