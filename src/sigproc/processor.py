from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Union

from .filters import BiquadStage, highpass_coefficients, lowpass_coefficients

MAX_OFFSET_SAMPLES = 1000

logger = logging.getLogger(__name__)


class ProcessorFlags(enum.IntFlag):
    NONE = 0x00
    RECTIFY = 0x0F
    NORMALIZE = 0xF0


class ProcessingPhase(str, enum.Enum):
    MEASUREMENT = "measurement"
    CALIBRATION = "calibration"
    OFFSET = "offset"


@dataclass
class SignalLimits:
    min: float = 0.0
    max: float = 0.0

    @property
    def span(self) -> float:
        return self.max - self.min


class SignalProcessor:
    """
    Stateful single-channel conditioner: gain, offset removal, high-pass,
    optional rectification, low-pass and optional normalization.

    The processor starts in the MEASUREMENT phase with unity gain and both
    filter stages set to pass-through. Invalid configuration values are
    ignored and leave the previous state untouched; nothing here raises for
    bad input. Instances are not thread-safe and callers driving one from
    several threads must serialize access themselves.
    """

    def __init__(
        self,
        flags: Union[ProcessorFlags, int] = ProcessorFlags.NONE,
        *,
        max_offset_samples: int = MAX_OFFSET_SAMPLES,
    ) -> None:
        flags = int(flags)
        self._rectify = bool(flags & ProcessorFlags.RECTIFY)
        self._normalize = bool(flags & ProcessorFlags.NORMALIZE)
        self._max_offset_samples = max(int(max_offset_samples), 1)
        self._input_gain = 1.0
        self._signal_offset = 0.0
        self._offset_sample_count = 0
        self._limits = SignalLimits()
        self._high_pass = BiquadStage()
        self._low_pass = BiquadStage()
        self._phase = ProcessingPhase.MEASUREMENT

    @property
    def flags(self) -> ProcessorFlags:
        flags = ProcessorFlags.NONE
        if self._rectify:
            flags |= ProcessorFlags.RECTIFY
        if self._normalize:
            flags |= ProcessorFlags.NORMALIZE
        return flags

    @property
    def rectify(self) -> bool:
        return self._rectify

    @property
    def normalize(self) -> bool:
        return self._normalize

    @property
    def input_gain(self) -> float:
        return self._input_gain

    @property
    def phase(self) -> ProcessingPhase:
        return self._phase

    @property
    def max_offset_samples(self) -> int:
        return self._max_offset_samples

    @property
    def offset_sample_count(self) -> int:
        return self._offset_sample_count

    @property
    def signal_limits(self) -> SignalLimits:
        return SignalLimits(self._limits.min, self._limits.max)

    @property
    def high_pass(self) -> BiquadStage:
        return self._high_pass

    @property
    def low_pass(self) -> BiquadStage:
        return self._low_pass

    def set_input_gain(self, gain: float) -> None:
        self._input_gain = float(gain)

    def set_max_frequency(self, relative_cutoff: float) -> bool:
        """Configure the low-pass stage; ``relative_cutoff`` is a fraction of fs."""
        coeffs = lowpass_coefficients(relative_cutoff)
        if coeffs is None:
            logger.debug("Ignoring low-pass cutoff %r (must be > 0)", relative_cutoff)
            return False
        self._low_pass.configure(*coeffs)
        return True

    def set_min_frequency(self, relative_cutoff: float) -> bool:
        """Configure the high-pass stage; ``relative_cutoff`` is a fraction of fs."""
        coeffs = highpass_coefficients(relative_cutoff)
        if coeffs is None:
            logger.debug("Ignoring high-pass cutoff %r (must be > 0)", relative_cutoff)
            return False
        self._high_pass.configure(*coeffs)
        return True

    def update_signal(self, samples: Iterable[float]) -> float:
        """
        Process a batch of raw samples and return a single value.

        In the OFFSET phase the samples only feed the running offset mean and
        the current estimate is returned. Otherwise each sample runs through
        the full chain and the value of the last one is returned; an empty
        batch returns the last low-pass output without touching the filters.
        """

        if self._phase is ProcessingPhase.OFFSET:
            gain = self._input_gain
            for raw in samples:
                count = self._offset_sample_count
                self._signal_offset += (float(raw) * gain - self._signal_offset) / (count + 1)
                if count < self._max_offset_samples:
                    self._offset_sample_count = count + 1
            return self._signal_offset

        value = self._low_pass.output
        calibrating = self._phase is ProcessingPhase.CALIBRATION
        limits = self._limits
        for raw in samples:
            value = float(raw) * self._input_gain - self._signal_offset
            value = self._high_pass.step(value)
            if self._rectify:
                value = abs(value)
            value = self._low_pass.step(value)

            if calibrating:
                if value > limits.max:
                    limits.max = value
                elif value < limits.min:
                    limits.min = value
            elif self._normalize and limits.min != limits.max:
                if value > limits.max:
                    value = limits.max
                elif value < limits.min:
                    value = limits.min
                value = value / (limits.max - limits.min)
        return value

    def set_state(self, new_phase: Union[ProcessingPhase, str, int]) -> bool:
        """
        Switch the processing phase.

        Entering CALIBRATION clears the recorded limits and entering OFFSET
        clears the offset estimate; MEASUREMENT keeps both. Accepts the enum,
        its name, or its index (0 measurement, 1 calibration, 2 offset);
        anything else is ignored.
        """

        phase = _coerce_phase(new_phase)
        if phase is None:
            logger.debug("Ignoring unknown processing phase %r", new_phase)
            return False
        if phase is ProcessingPhase.CALIBRATION:
            self._limits.min = 0.0
            self._limits.max = 0.0
        elif phase is ProcessingPhase.OFFSET:
            self._signal_offset = 0.0
            self._offset_sample_count = 0
        self._phase = phase
        return True

    def get_offset(self) -> float:
        # provisional while still measuring
        if self._phase is ProcessingPhase.OFFSET:
            return 0.0
        return self._signal_offset

    def get_amplitude(self) -> float:
        if self._limits.max == self._limits.min:
            return 1.0
        return self._limits.max - self._limits.min


_PHASE_ORDER = (
    ProcessingPhase.MEASUREMENT,
    ProcessingPhase.CALIBRATION,
    ProcessingPhase.OFFSET,
)


def _coerce_phase(value: object) -> ProcessingPhase | None:
    if isinstance(value, ProcessingPhase):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < len(_PHASE_ORDER):
            return _PHASE_ORDER[value]
        return None
    if isinstance(value, str):
        try:
            return ProcessingPhase(value.strip().lower())
        except ValueError:
            return None
    return None
