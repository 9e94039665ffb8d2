"""Loading recorded raw sample streams."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import numpy as np
import pandas as pd

DEFAULT_COLUMN = "raw"


@dataclass(frozen=True)
class SampleSeries:
    """One recorded channel, in acquisition order."""

    dataframe: pd.DataFrame
    values: np.ndarray
    time: Optional[np.ndarray]
    column: str

    def __len__(self) -> int:
        return int(self.values.size)


def load_samples_csv(
    path: str | Path,
    column: str = DEFAULT_COLUMN,
    time_column: str | None = None,
) -> SampleSeries:
    """Load a single raw channel from *path*.

    Parameters
    ----------
    path:
        CSV file with one row per sample.
    column:
        Name of the column holding raw sample values.
    time_column:
        Optional timestamp column carried through to the replay table.

    Returns
    -------
    SampleSeries
        Samples as float array, rows with a missing value dropped.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)

    df = pd.read_csv(path, comment="#")
    required = {column} | ({time_column} if time_column else set())
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {sorted(missing)}")

    df = df.dropna(subset=[column]).reset_index(drop=True)
    if df.empty:
        raise ValueError(f"{path} contains no samples in column '{column}'")
    return series_from_dataframe(df, column=column, time_column=time_column)


def series_from_dataframe(
    df: pd.DataFrame,
    column: str = DEFAULT_COLUMN,
    time_column: str | None = None,
) -> SampleSeries:
    values = df[column].to_numpy(dtype=float)
    time = df[time_column].to_numpy(dtype=float) if time_column else None
    return SampleSeries(dataframe=df, values=values, time=time, column=column)


def iter_batches(values: np.ndarray, batch_size: int) -> Iterator[np.ndarray]:
    """Yield consecutive slices of *values*; the last one may be shorter."""

    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    for start in range(0, values.size, batch_size):
        yield values[start : start + batch_size]
