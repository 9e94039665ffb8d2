"""
Handle-style call surface for embedding control loops.

Each function takes the processor as its first argument and tolerates
``None`` in its place: the call is then a no-op and getters return 0.0.
"""
from __future__ import annotations

from typing import Iterable, Optional, Union

from .processor import ProcessingPhase, ProcessorFlags, SignalProcessor


def create(flags: Union[ProcessorFlags, int] = ProcessorFlags.NONE) -> SignalProcessor:
    return SignalProcessor(flags)


def discard(processor: Optional[SignalProcessor]) -> None:
    # nothing to release; kept for symmetry with create()
    return None


def set_input_gain(processor: Optional[SignalProcessor], gain: float) -> None:
    if processor is None:
        return
    processor.set_input_gain(gain)


def set_max_frequency(processor: Optional[SignalProcessor], relative_cutoff: float) -> None:
    if processor is None:
        return
    processor.set_max_frequency(relative_cutoff)


def set_min_frequency(processor: Optional[SignalProcessor], relative_cutoff: float) -> None:
    if processor is None:
        return
    processor.set_min_frequency(relative_cutoff)


def update_signal(processor: Optional[SignalProcessor], samples: Iterable[float]) -> float:
    if processor is None:
        return 0.0
    return processor.update_signal(samples)


def set_state(
    processor: Optional[SignalProcessor], phase: Union[ProcessingPhase, str, int]
) -> None:
    if processor is None:
        return
    processor.set_state(phase)


def get_offset(processor: Optional[SignalProcessor]) -> float:
    if processor is None:
        return 0.0
    return processor.get_offset()


def get_amplitude(processor: Optional[SignalProcessor]) -> float:
    if processor is None:
        return 0.0
    return processor.get_amplitude()
