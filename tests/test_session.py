from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from sigproc.config import load_config
from sigproc.data import iter_batches, load_samples_csv, series_from_dataframe
from sigproc.demo import create_demo_signal, run_demo
from sigproc.processor import ProcessingPhase
from sigproc.reporting import export_results, summarize
from sigproc.session import plan_segments, run_replay


def _step_recording() -> pd.DataFrame:
    rest = np.full(20, 0.5)
    calibration = np.concatenate([np.full(5, 0.5), np.full(5, 2.5), np.full(5, -1.5)])
    measurement = np.array([0.5, 4.5, -10.0, 1.5])
    raw = np.concatenate([rest, calibration, measurement])
    return pd.DataFrame({"t": np.arange(raw.size) * 0.01, "raw": raw})


def test_load_samples_csv(tmp_path: Path) -> None:
    csv_path = tmp_path / "samples.csv"
    pd.DataFrame({"raw": [1.0, None, 3.0], "t": [0.0, 0.1, 0.2]}).to_csv(csv_path, index=False)
    series = load_samples_csv(csv_path, time_column="t")
    assert len(series) == 2
    assert np.allclose(series.values, [1.0, 3.0])
    assert np.allclose(series.time, [0.0, 0.2])


def test_load_samples_csv_missing_column(tmp_path: Path) -> None:
    csv_path = tmp_path / "samples.csv"
    pd.DataFrame({"emg": [1.0]}).to_csv(csv_path, index=False)
    with pytest.raises(ValueError):
        load_samples_csv(csv_path)
    with pytest.raises(FileNotFoundError):
        load_samples_csv(tmp_path / "missing.csv")


def test_iter_batches_keeps_tail() -> None:
    batches = list(iter_batches(np.arange(7, dtype=float), 3))
    assert [batch.size for batch in batches] == [3, 3, 1]
    with pytest.raises(ValueError):
        list(iter_batches(np.arange(3, dtype=float), 0))


def test_plan_segments() -> None:
    segments = plan_segments(10, offset_samples=4, calibration_samples=3)
    assert [(s.phase, s.start, s.stop) for s in segments] == [
        (ProcessingPhase.OFFSET, 0, 4),
        (ProcessingPhase.CALIBRATION, 4, 7),
        (ProcessingPhase.MEASUREMENT, 7, 10),
    ]
    short = plan_segments(3, offset_samples=5, calibration_samples=2)
    assert [(s.phase, s.start, s.stop) for s in short] == [(ProcessingPhase.OFFSET, 0, 3)]
    assert [s.phase for s in plan_segments(4, 0, 0)] == [ProcessingPhase.MEASUREMENT]


def test_replay_offset_calibration_measurement() -> None:
    series = series_from_dataframe(_step_recording(), time_column="t")
    cfg = load_config(
        None,
        [
            "normalize=true",
            "replay.batch_size=5",
            "replay.offset_samples=20",
            "replay.calibration_samples=15",
        ],
    )
    ticks = []
    result = run_replay(series, cfg, on_tick=ticks.append)

    assert result.offset == 0.5
    assert result.limits.min == -2.0
    assert result.limits.max == 2.0
    assert result.amplitude == 4.0
    assert len(ticks) == len(result.table) == 4 + 3 + 1
    assert list(result.table["phase"]) == ["offset"] * 4 + ["calibration"] * 3 + ["measurement"]
    assert result.table["processed"].iloc[0] == 0.5
    # measurement tick ends with raw 1.5 -> (1.5 - 0.5) / 4
    assert result.table["processed"].iloc[-1] == 0.25
    assert "time_last" in result.table.columns
    assert np.isclose(result.table["time_last"].iloc[-1], 0.38)
    assert result.processor.phase is ProcessingPhase.MEASUREMENT


def test_replay_short_recording_commits_offset() -> None:
    series = series_from_dataframe(pd.DataFrame({"raw": [2.0, 4.0]}))
    cfg = load_config(None, ["replay.offset_samples=10"])
    result = run_replay(series, cfg)
    assert result.offset == 3.0
    assert result.processor.phase is ProcessingPhase.MEASUREMENT


def test_export_results(tmp_path: Path) -> None:
    series = series_from_dataframe(_step_recording())
    cfg = load_config(None, ["replay.offset_samples=20", "replay.calibration_samples=15"])
    result = run_replay(series, cfg)
    export_results(result, tmp_path)
    assert (tmp_path / "processed.csv").exists()
    assert (tmp_path / "summary.csv").exists()
    report = (tmp_path / "report.md").read_text(encoding="utf-8")
    assert "Amplitude" in report
    summary = summarize(result).set_index("metric")["value"]
    assert summary["offset"] == 0.5
    assert summary["output_max"] == 4.0
    assert summary["output_min"] == -10.5


def test_demo_signal_segments() -> None:
    df = create_demo_signal(rest_sec=0.5, calibration_sec=1.0, measurement_sec=1.5)
    assert len(df) == 3000
    assert set(df["segment"]) == {"rest", "calibration", "measurement"}
    rest = df[df["segment"] == "rest"]["raw"]
    assert abs(rest.mean() - 0.4) < 0.05


def test_run_demo_writes_report(tmp_path: Path) -> None:
    run_demo(tmp_path)
    assert (tmp_path / "demo_data.csv").exists()
    assert (tmp_path / "report.md").exists()
    processed = pd.read_csv(tmp_path / "processed.csv")
    measured = processed[processed["phase"] == "measurement"]["processed"]
    assert not measured.empty
    assert measured.max() <= 1.0 + 1e-9
