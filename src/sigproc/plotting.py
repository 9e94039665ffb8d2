"""Plotting helpers for replay outputs."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np

from .session import ReplayResult

PHASE_COLORS = {
    "offset": "tab:gray",
    "calibration": "tab:orange",
    "measurement": "tab:blue",
}


def generate_plots(result: ReplayResult, output_dir: Path) -> Path:
    plt = _require_matplotlib()
    output_dir.mkdir(parents=True, exist_ok=True)
    fig, axes = plt.subplots(2, 1, figsize=(12, 7), sharex=True)

    _plot_raw(result, axes[0])
    _plot_processed(result, axes[1])

    fig.tight_layout()
    out_path = output_dir / "plots.png"
    fig.savefig(out_path, dpi=200)
    plt.close(fig)
    return out_path


def _sample_axis(result: ReplayResult) -> np.ndarray:
    if result.data.time is not None:
        return result.data.time
    return np.arange(len(result.data), dtype=float)


def _plot_raw(result: ReplayResult, ax) -> None:
    ax.plot(_sample_axis(result), result.data.values, color="black", linewidth=0.6, label="raw")
    ax.axhline(result.offset, color="tab:red", linestyle="--", linewidth=0.8, label="offset")
    ax.set_title("Raw signal")
    ax.set_ylabel(result.data.column)
    ax.legend(loc="best")


def _plot_processed(result: ReplayResult, ax) -> None:
    table = result.table
    x_all = _sample_axis(result)
    for phase, group in table.groupby("phase", sort=False):
        last = (group["first_sample"] + group["samples"] - 1).to_numpy()
        ax.plot(
            x_all[last],
            group["processed"],
            color=PHASE_COLORS.get(str(phase), "tab:green"),
            label=str(phase),
        )
    ax.set_title("Processed output")
    ax.set_xlabel("Time" if result.data.time is not None else "Sample")
    ax.set_ylabel("Processed")
    ax.legend(loc="best")


def _require_matplotlib() -> Any:
    home_cache = Path.home() / ".cache" / "fontconfig"
    try:
        home_cache.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RuntimeError("matplotlib cannot write font cache in this environment") from exc

    try:
        import matplotlib
        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("matplotlib is required for plotting; install sigproc[plot]") from exc
    except Exception as exc:  # pragma: no cover - environment issues
        raise RuntimeError(f"matplotlib initialisation failed: {exc}") from exc
    return plt
