# %% Imports ---------------------------------------------------------------
from __future__ import annotations

import time
from pathlib import Path

import numba
import pandas as pd

from mandelraster.baseline import compute_mandelbrot as baseline_compute
from mandelraster.config import default_render_config
from mandelraster.execution import run_render

# %% Benchmark configuration -----------------------------------------------
UPPER_LEFT = complex(-2.2, 1.3)
LOWER_RIGHT = complex(0.75, -1.3)
SIZES = ["125x125", "250x250", "500x500", "1000x1000"]
WORKERS = [1, 2, 4, 8]
SCHEDULES = ["serial", "static", "dynamic", "numba"]
CHUNK_SIZE = 16
OUTPUT = Path("benchmarks/results/schedules.csv")

# Trigger JIT compilation once so timings below reflect steady-state behaviour.
for _schedule in SCHEDULES:
    run_render(default_render_config(image_size="32x32", schedule=_schedule, workers=2))


# %% Benchmark loop ---------------------------------------------------------
rows: list[dict[str, object]] = []

for size_str in SIZES:
    base = default_render_config(
        image_size=size_str,
        upper_left=UPPER_LEFT,
        lower_right=LOWER_RIGHT,
        chunk_size=CHUNK_SIZE,
    )

    print(f"Running baseline for size {size_str}...")
    start = time.perf_counter()
    baseline_compute(base.bounds, base.region)
    rows.append({"Implementation": "Baseline", "workers": 0, "Image Size": size_str, "Time (s)": time.perf_counter() - start})

    for schedule in SCHEDULES:
        worker_counts = WORKERS if schedule in ("static", "dynamic") else [numba.get_num_threads()]
        for workers in worker_counts:
            cfg = default_render_config(**{**base.to_dict(), "schedule": schedule, "workers": workers})
            print(f"Running {cfg.run_name}...")
            report = run_render(cfg)
            rows.append(
                {
                    "Implementation": schedule.title(),
                    "workers": workers,
                    "Image Size": size_str,
                    "Time (s)": report.timing["wall_time"],
                }
            )


# %% Save results -----------------------------------------------------------
df = pd.DataFrame(rows)
OUTPUT.parent.mkdir(parents=True, exist_ok=True)
df.to_csv(OUTPUT, index=False)
print(df.pivot_table(index=["Implementation", "workers"], columns="Image Size", values="Time (s)"))
print(f"Results saved to {OUTPUT}")
