"""Replay a recorded channel through the offset, calibration and measurement phases."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

import numpy as np
import pandas as pd

from .config import ProcessorConfig, build_processor
from .data import SampleSeries, iter_batches
from .processor import ProcessingPhase, SignalLimits, SignalProcessor

logger = logging.getLogger(__name__)

TICK_COLUMNS = ["tick", "phase", "first_sample", "samples", "raw_last", "processed"]


@dataclass(frozen=True)
class TickRecord:
    tick: int
    phase: str
    first_sample: int
    samples: int
    raw_last: float
    processed: float


@dataclass(frozen=True)
class ReplayResult:
    data: SampleSeries
    config: ProcessorConfig
    table: pd.DataFrame
    offset: float
    amplitude: float
    limits: SignalLimits
    processor: SignalProcessor


@dataclass(frozen=True)
class PhaseSegment:
    phase: ProcessingPhase
    start: int
    stop: int


def plan_segments(total: int, offset_samples: int, calibration_samples: int) -> List[PhaseSegment]:
    """Split *total* samples into consecutive phase segments, skipping empty ones."""

    segments: List[PhaseSegment] = []
    cursor = 0
    for phase, length in (
        (ProcessingPhase.OFFSET, offset_samples),
        (ProcessingPhase.CALIBRATION, calibration_samples),
        (ProcessingPhase.MEASUREMENT, total),
    ):
        stop = min(cursor + max(length, 0), total)
        if stop > cursor:
            segments.append(PhaseSegment(phase=phase, start=cursor, stop=stop))
        cursor = stop
    return segments


def run_replay(
    series: SampleSeries,
    config: ProcessorConfig,
    *,
    on_tick: Optional[Callable[[TickRecord], None]] = None,
) -> ReplayResult:
    """Feed *series* through a processor built from *config*, one batch per tick."""

    processor = build_processor(config)
    records: List[TickRecord] = []
    for record in _iter_ticks(processor, series.values, config):
        records.append(record)
        if on_tick is not None:
            on_tick(record)

    if processor.phase is not ProcessingPhase.MEASUREMENT:
        # commit the offset / limits of a recording that ended early
        processor.set_state(ProcessingPhase.MEASUREMENT)

    table = pd.DataFrame([record.__dict__ for record in records], columns=TICK_COLUMNS)
    if series.time is not None and not table.empty:
        last_index = table["first_sample"] + table["samples"] - 1
        table.insert(1, "time_last", series.time[last_index.to_numpy()])

    logger.info(
        "Replayed %d samples in %d ticks (offset=%.6g amplitude=%.6g)",
        len(series),
        len(records),
        processor.get_offset(),
        processor.get_amplitude(),
    )
    return ReplayResult(
        data=series,
        config=config,
        table=table,
        offset=processor.get_offset(),
        amplitude=processor.get_amplitude(),
        limits=processor.signal_limits,
        processor=processor,
    )


def _iter_ticks(
    processor: SignalProcessor, values: np.ndarray, config: ProcessorConfig
) -> Iterator[TickRecord]:
    segments = plan_segments(
        int(values.size), config.replay.offset_samples, config.replay.calibration_samples
    )
    tick = 0
    for segment in segments:
        previous = processor.phase
        processor.set_state(segment.phase)
        if previous is ProcessingPhase.OFFSET:
            logger.info(
                "Offset committed: %.6g (%d samples)",
                processor.get_offset(),
                processor.offset_sample_count,
            )
        elif previous is ProcessingPhase.CALIBRATION:
            limits = processor.signal_limits
            logger.info("Calibrated limits: min=%.6g max=%.6g", limits.min, limits.max)

        batches = iter_batches(values[segment.start : segment.stop], config.replay.batch_size)
        first = segment.start
        for batch in batches:
            processed = processor.update_signal(batch)
            yield TickRecord(
                tick=tick,
                phase=segment.phase.value,
                first_sample=first,
                samples=int(batch.size),
                raw_last=float(batch[-1]),
                processed=float(processed),
            )
            first += int(batch.size)
            tick += 1
