"""Command line interface for the sigproc package."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from .config import PRESETS, load_config, preset_overrides
from .data import DEFAULT_COLUMN, load_samples_csv
from .demo import run_demo
from .plotting import generate_plots
from .reporting import export_results
from .session import run_replay

app = typer.Typer(context_settings={"help_option_names": ["-h", "--help"]})


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Single-channel signal conditioning tools."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def replay(
    input_path: Path = typer.Option(..., "--in", help="Input CSV with recorded raw samples."),
    report_dir: Path = typer.Option(..., "--report", help="Output directory for reports."),
    column: str = typer.Option(DEFAULT_COLUMN, "--column", help="Column holding raw samples."),
    time_column: Optional[str] = typer.Option(None, "--time-column", help="Optional timestamp column."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Processor config JSON."),
    preset: Optional[str] = typer.Option(
        None,
        "--preset",
        "-P",
        help=f"Apply preset ({'|'.join(PRESETS)}) before other overrides.",
    ),
    override: Optional[List[str]] = typer.Option(
        None,
        "--set",
        help="Override config keys, e.g. --set filters.max_frequency=0.05 --set replay.batch_size=10",
    ),
    plot: bool = typer.Option(True, "--plot/--no-plot", help="Write plots.png next to the report."),
) -> None:
    """Run a recorded channel through offset, calibration and measurement."""

    preset_list: list[str] = []
    if preset:
        key = preset.lower()
        if key not in PRESETS:
            raise typer.BadParameter(f"Unknown preset '{preset}'. Expected one of {list(PRESETS)}")
        preset_list = preset_overrides(key)
    try:
        config = load_config(config_path, preset_list + (override or []))
        series = load_samples_csv(input_path, column=column, time_column=time_column)
    except (ValueError, FileNotFoundError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    result = run_replay(series, config)

    figure_path = None
    if plot:
        try:
            figure_path = generate_plots(result, report_dir)
        except RuntimeError as exc:
            typer.echo(f"[warning] plotting skipped: {exc}")

    export_results(
        result,
        report_dir,
        figure_path=figure_path,
        input_path=input_path,
        preset=preset.lower() if preset else None,
    )

    typer.echo(f"offset={result.offset:.6g} amplitude={result.amplitude:.6g}")
    typer.echo(f"Report written to {report_dir}")


@app.command()
def demo(
    out_dir: Path = typer.Option(Path("demo_output"), "--out", help="Target directory for demo report."),
) -> None:
    """Generate a synthetic recording and replay it."""

    run_demo(out_dir)
    typer.echo(f"Demo dataset and report written to {out_dir}")


def run() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    run()
