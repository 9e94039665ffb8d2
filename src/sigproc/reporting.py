"""Report writers for replay results."""
from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from .session import ReplayResult

logger = logging.getLogger(__name__)


def export_results(
    result: ReplayResult,
    output_dir: Path,
    *,
    figure_path: Path | None = None,
    input_path: Path | None = None,
    preset: str | None = None,
) -> None:
    """Persist the tick table, summary and markdown report to *output_dir*."""

    output_dir.mkdir(parents=True, exist_ok=True)
    result.table.to_csv(output_dir / "processed.csv", index=False)
    summarize(result).to_csv(output_dir / "summary.csv", index=False)
    _write_report_md(
        result,
        output_dir,
        figure_path=figure_path,
        input_path=input_path,
        preset=preset,
    )
    logger.info("Report written to %s", output_dir)


def summarize(result: ReplayResult) -> pd.DataFrame:
    rows: list[dict[str, object]] = [
        {"metric": "offset", "phase": "offset", "value": result.offset},
        {"metric": "limit_min", "phase": "calibration", "value": result.limits.min},
        {"metric": "limit_max", "phase": "calibration", "value": result.limits.max},
        {"metric": "amplitude", "phase": "calibration", "value": result.amplitude},
    ]
    measured = result.table[result.table["phase"] == "measurement"]["processed"].to_numpy(dtype=float)
    if measured.size:
        rows.extend(
            [
                {"metric": "output_min", "phase": "measurement", "value": float(np.min(measured))},
                {"metric": "output_max", "phase": "measurement", "value": float(np.max(measured))},
                {"metric": "output_mean", "phase": "measurement", "value": float(np.mean(measured))},
            ]
        )
    return pd.DataFrame(rows)


def _write_report_md(
    result: ReplayResult,
    output_dir: Path,
    *,
    figure_path: Path | None,
    input_path: Path | None,
    preset: str | None,
) -> None:
    config = result.config
    lines: list[str] = []
    lines.append("# Signal Processing Replay Report")
    if input_path is not None:
        lines.append(f"*Input file:* `{input_path}` (column `{result.data.column}`)  ")
    lines.append(f"*Samples:* {len(result.data)}  ")
    lines.append(f"*Ticks:* {len(result.table)} (batch size {config.replay.batch_size})  ")
    if preset:
        lines.append(f"*Preset:* {preset}  ")
    lines.append("")

    lines.append("## Configuration")
    lines.append("| Setting | Value |")
    lines.append("| --- | ---: |")
    lines.append(f"| Input gain | {config.input_gain:.6g} |")
    lines.append(f"| Rectify | {'yes' if config.rectify else 'no'} |")
    lines.append(f"| Normalize | {'yes' if config.normalize else 'no'} |")
    lines.append(f"| High-pass cutoff (fs) | {_fmt_cutoff(config.filters.min_frequency)} |")
    lines.append(f"| Low-pass cutoff (fs) | {_fmt_cutoff(config.filters.max_frequency)} |")
    lines.append("")

    lines.append("## Calibration")
    lines.append("| Quantity | Value |")
    lines.append("| --- | ---: |")
    lines.append(f"| Offset | {result.offset:.6g} |")
    lines.append(f"| Limit min | {result.limits.min:.6g} |")
    lines.append(f"| Limit max | {result.limits.max:.6g} |")
    lines.append(f"| Amplitude | {result.amplitude:.6g} |")
    lines.append("")

    if figure_path is not None:
        lines.append(f"![Replay plots]({figure_path.name})")
        lines.append("")

    lines.append("### Notes")
    lines.append("- Offset is the gain-scaled mean of raw samples seen in the offset phase.")
    lines.append(
        "- Normalized output is divided by the calibrated range without subtracting the minimum."
    )

    (output_dir / "report.md").write_text("\n".join(lines), encoding="utf-8")


def _fmt_cutoff(value: float | None) -> str:
    return "off" if value is None else f"{value:.6g}"
