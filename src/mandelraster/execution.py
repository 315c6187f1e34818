"""Execution helpers: serial and parallel render backends and CLI workflows."""

from __future__ import annotations

import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .computation import allocate_buffer, render, render_prange, render_rows
from .config import RenderConfig
from .image import write_image
from .report import RenderReport, write_report
from .scheduling import DynamicScheduler, StaticScheduler, chunk_rows

__all__ = ["run_render", "run_single_render", "run_configs"]


def _init_worker_stats() -> Dict[str, float]:
    return {
        "comp": 0.0,
        "chunks": 0.0,
    }


def _worker_log(worker: int, message: str, verbose: bool) -> None:
    """Emit a progress message from a given worker."""
    if verbose:
        print(f"[Worker {worker}] {message}", flush=True)


def _chunk_record(worker: int, chunk_id: int, start: int, end: int, comp_time: float) -> Dict:
    """Create a uniform chunk metadata record."""
    return {
        "worker": worker,
        "chunk_id": int(chunk_id),
        "start_row": int(start),
        "end_row": int(end),
        "comp_time": comp_time,
    }


def _render_chunk_timed(pixels: np.ndarray, config: RenderConfig, chunk_id: int) -> Tuple[int, int, float]:
    """Render one chunk in place and return its row range and elapsed time."""
    start, end = chunk_rows(config, chunk_id)
    comp_start = time.perf_counter()
    render_rows(pixels, config.bounds, config.region, start, end)
    return start, end, time.perf_counter() - comp_start


def _run_chunks(
    pixels: np.ndarray,
    config: RenderConfig,
    worker: int,
    chunk_ids,
    label: str,
    verbose: bool,
) -> Tuple[Dict[str, float], List[Dict]]:
    stats = _init_worker_stats()
    chunk_details: List[Dict] = []
    for cid in chunk_ids:
        start, end, single_comp = _render_chunk_timed(pixels, config, cid)
        _worker_log(
            worker,
            f"Rendering chunk {cid} (rows {start}:{end}) took {single_comp:.4f}s [{label}]",
            verbose,
        )
        stats["comp"] += single_comp
        stats["chunks"] += 1
        chunk_details.append(_chunk_record(worker, cid, start, end, single_comp))
    return stats, chunk_details


def _dynamic_chunks(scheduler: DynamicScheduler):
    while True:
        chunk_id = scheduler.request_chunk()
        if chunk_id is None:
            return
        yield chunk_id


def _run_whole(pixels: np.ndarray, config: RenderConfig) -> Tuple[List[Dict], List[Dict]]:
    """Render every row with a single call (serial or numba prange)."""
    renderer = render_prange if config.schedule == "numba" else render
    comp_start = time.perf_counter()
    renderer(pixels, config.bounds, config.region)
    comp = time.perf_counter() - comp_start
    stats = {"comp": comp, "chunks": 1.0}
    return [stats], [_chunk_record(0, 0, 0, config.height, comp)]


def _run_pool(pixels: np.ndarray, config: RenderConfig, verbose: bool) -> Tuple[List[Dict], List[Dict]]:
    """Render chunks on a thread pool; each chunk owns a disjoint band of rows."""
    if config.schedule == "static":
        scheduler = StaticScheduler(config, config.workers)
        chunk_sources = [scheduler.chunks_for_worker(worker) for worker in range(config.workers)]
    else:
        dynamic = DynamicScheduler(config)
        chunk_sources = [_dynamic_chunks(dynamic) for _ in range(config.workers)]

    with ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="render") as executor:
        futures = [
            executor.submit(_run_chunks, pixels, config, worker, chunk_ids, config.schedule, verbose)
            for worker, chunk_ids in enumerate(chunk_sources)
        ]
        results = [future.result() for future in futures]

    all_times = [stats for stats, _ in results]
    chunk_records = [record for _, records in results for record in records]
    return all_times, chunk_records


def run_render(config: RenderConfig, *, verbose: bool = False) -> RenderReport:
    """Render ``config`` with its schedule and return pixels plus timings."""
    config.validate()
    pixels = allocate_buffer(config.bounds)

    start_time = time.perf_counter()
    if config.schedule in ("serial", "numba"):
        all_times, chunk_records = _run_whole(pixels, config)
    else:
        all_times, chunk_records = _run_pool(pixels, config, verbose)
    total_time = time.perf_counter() - start_time

    return RenderReport(pixels, _aggregate_timing(all_times, total_time), chunk_records)


def run_single_render(
    config: RenderConfig,
    report_path: Optional[str | Path] = None,
    *,
    verbose: bool = True,
) -> RenderReport:
    """Render one config and write its PNG (and optional CSV chunk report)."""
    if verbose:
        print(
            f"[Run] Starting render '{config.run_name}' "
            f"(schedule={config.schedule}, workers={config.workers}, chunks={config.total_chunks})",
            flush=True,
        )

    report = run_render(config, verbose=verbose)
    path = write_image(config.output, report.pixels, config.bounds)

    if report_path is not None:
        write_report(report, report_path)

    if verbose:
        print(f"[Image] Wrote {path}", flush=True)
        wall_time = report.timing.get("wall_time", 0.0)
        print(f"[Timing] Total: {wall_time:.4f}s", flush=True)
    return report


def run_configs(configs: List[RenderConfig], descriptor: str = "config", *, verbose: bool = True) -> int:
    """Render every config in turn and return a process exit code.

    With ``verbose`` off only failures are printed, on stderr.
    """
    if not configs:
        print("ERROR: No renders found in configuration", file=sys.stderr)
        return 1

    if verbose:
        print("=" * 70)
        print(f"Running {len(configs)} renders from {descriptor}")
        print("=" * 70)

    successes = 0
    failures: List[Tuple[int, str]] = []

    for idx, cfg in enumerate(configs):
        if verbose:
            print(f"\n[{idx + 1}/{len(configs)}] {cfg.output} ({cfg.run_name})", flush=True)
        try:
            run_single_render(cfg, verbose=verbose)
        except (ValueError, OSError) as exc:
            print(f"    FAILED [{idx}] {cfg.output}: {exc}", file=sys.stderr)
            failures.append((idx, cfg.output))
            continue
        successes += 1

    if verbose:
        print("\n" + "=" * 70)
        print("Summary")
        print("=" * 70)
        print(f"Total:      {len(configs)}")
        print(f"Successful: {successes}")
        print(f"Failed:     {len(failures)}")

    if failures:
        if verbose:
            print("\nFailed renders:")
            for idx, name in failures:
                print(f"  [{idx}] {name}")
        return 1

    return 0


def _aggregate_timing(all_times: List[Dict], total_time: float) -> Dict[str, Any]:
    """Aggregate wall-clock timing plus per-worker statistics."""
    worker_stats: List[Dict[str, float]] = []
    comp_total = 0.0
    total_chunks = 0

    for worker, stats in enumerate(all_times):
        comp = float(stats.get("comp", 0.0))
        chunks = int(stats.get("chunks", 0))
        worker_stats.append({"worker": worker, "comp_time": comp, "chunks": chunks})
        comp_total += comp
        total_chunks += chunks

    return {
        "wall_time": float(total_time),
        "comp_total": comp_total,
        "total_chunks": total_chunks,
        "worker_stats": worker_stats,
    }
