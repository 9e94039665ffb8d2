"""Demo dataset utilities."""
from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from .config import load_config, preset_overrides
from .data import load_samples_csv
from .plotting import generate_plots
from .reporting import export_results
from .session import run_replay

logger = logging.getLogger(__name__)

DEMO_RATE_HZ = 1000.0
DEMO_PRESET = "emg"


def create_demo_signal(
    rest_sec: float = 1.0,
    calibration_sec: float = 2.0,
    measurement_sec: float = 3.0,
    rate_hz: float = DEMO_RATE_HZ,
) -> pd.DataFrame:
    rng = np.random.default_rng(42)
    bias = 0.4
    carrier_hz = 80.0
    drift_hz = 0.2

    n_rest = int(rest_sec * rate_hz)
    n_cal = int(calibration_sec * rate_hz)
    n_meas = int(measurement_sec * rate_hz)
    n_total = n_rest + n_cal + n_meas
    t = np.arange(n_total) / rate_hz

    envelope = np.zeros(n_total)
    # one full-strength burst during calibration
    cal_t = np.arange(n_cal) / rate_hz
    envelope[n_rest : n_rest + n_cal] = np.sin(np.pi * cal_t / calibration_sec) ** 2
    # weaker bursts during measurement
    meas_start = n_rest + n_cal
    burst_len = n_meas // 3
    for idx, level in enumerate((0.3, 0.6, 0.9)):
        start = meas_start + idx * burst_len
        burst_t = np.arange(burst_len) / rate_hz
        envelope[start : start + burst_len] = level * np.sin(np.pi * burst_t / (burst_len / rate_hz)) ** 2

    carrier = np.sin(2.0 * np.pi * carrier_hz * t) + 0.3 * rng.normal(size=n_total)
    drift = 0.05 * np.sin(2.0 * np.pi * drift_hz * t)
    raw = bias + drift + envelope * carrier + rng.normal(scale=0.02, size=n_total)

    segment = np.array(["rest"] * n_rest + ["calibration"] * n_cal + ["measurement"] * n_meas)
    return pd.DataFrame({"time_s": t, "raw": raw, "segment": segment})


def run_demo(out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    csv_path = out_dir / "demo_data.csv"
    df = create_demo_signal()
    df.to_csv(csv_path, index=False)

    counts = df["segment"].value_counts()
    overrides = preset_overrides(DEMO_PRESET) + [
        "replay.batch_size=10",
        f"replay.offset_samples={int(counts.get('rest', 0))}",
        f"replay.calibration_samples={int(counts.get('calibration', 0))}",
    ]
    config = load_config(None, overrides)
    series = load_samples_csv(csv_path, column="raw", time_column="time_s")
    result = run_replay(series, config)

    figure_path = None
    try:
        figure_path = generate_plots(result, out_dir)
    except RuntimeError as exc:
        logger.warning("plotting skipped: %s", exc)

    export_results(
        result,
        out_dir,
        figure_path=figure_path,
        input_path=csv_path,
        preset=DEMO_PRESET,
    )
