"""Second-order IIR filter stage and coefficient design helpers."""
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

FILTER_LENGTH = 3
MAX_RELATIVE_CUTOFF = 0.49

Coefficients = Tuple[Tuple[float, float, float], Tuple[float, float, float]]


class BiquadStage:
    """
    Direct-form biquad with 3 feed-forward and 3 feedback coefficients.

    Histories are ordered most-recent-first and live in fixed numpy arrays that
    are shifted in place. ``feedback[0]`` is always 0 since a biquad has no
    zero-lag feedback term. A new stage is the identity transform.
    """

    def __init__(self) -> None:
        self._feedforward = np.zeros(FILTER_LENGTH, dtype=float)
        self._feedback = np.zeros(FILTER_LENGTH, dtype=float)
        self._inputs = np.zeros(FILTER_LENGTH, dtype=float)
        self._outputs = np.zeros(FILTER_LENGTH, dtype=float)
        self._feedforward[0] = 1.0

    @property
    def feedforward(self) -> Tuple[float, ...]:
        return tuple(float(value) for value in self._feedforward)

    @property
    def feedback(self) -> Tuple[float, ...]:
        return tuple(float(value) for value in self._feedback)

    @property
    def output(self) -> float:
        """Most recent output (lag 0 of the output history)."""
        return float(self._outputs[0])

    def configure(self, feedforward: Sequence[float], feedback: Sequence[float]) -> None:
        """Replace the coefficients, keeping the current history."""
        if len(feedforward) != FILTER_LENGTH or len(feedback) != FILTER_LENGTH:
            raise ValueError(f"biquad coefficients must have {FILTER_LENGTH} elements")
        self._feedforward[:] = feedforward
        self._feedback[:] = feedback
        self._feedback[0] = 0.0

    def step(self, value: float) -> float:
        _shift(self._inputs, value)
        _shift(self._outputs, 0.0)
        result = float(
            np.dot(self._feedforward, self._inputs) - np.dot(self._feedback, self._outputs)
        )
        self._outputs[0] = result
        return result

    def reset(self) -> None:
        self._inputs.fill(0.0)
        self._outputs.fill(0.0)


def _shift(history: np.ndarray, value: float) -> None:
    for index in range(FILTER_LENGTH - 1, 0, -1):
        history[index] = history[index - 1]
    history[0] = value


def clamp_relative_cutoff(relative_cutoff: float) -> Optional[float]:
    """
    Validate a cutoff given as a fraction of the sampling frequency.

    Returns ``None`` for non-positive (or NaN) values and clamps anything at or
    above the Nyquist limit to ``MAX_RELATIVE_CUTOFF``.
    """

    cutoff = float(relative_cutoff)
    if not cutoff > 0.0:
        return None
    if cutoff >= 0.5:
        return MAX_RELATIVE_CUTOFF
    return cutoff


def _denominator(relative_cutoff: float) -> tuple[float, float, float, float]:
    omega = 2.0 * math.pi * relative_cutoff
    omega_sq = omega * omega
    gain = 4.0 + 2.0 * math.sqrt(2.0) * omega + omega_sq
    b1 = (-8.0 + 2.0 * omega_sq) / gain
    b2 = (4.0 - 2.0 * math.sqrt(2.0) * omega + omega_sq) / gain
    return omega_sq, gain, b1, b2


def lowpass_coefficients(relative_cutoff: float) -> Optional[Coefficients]:
    """Butterworth-style low-pass biquad for *relative_cutoff* (fraction of fs)."""

    cutoff = clamp_relative_cutoff(relative_cutoff)
    if cutoff is None:
        return None
    omega_sq, gain, b1, b2 = _denominator(cutoff)
    a0 = omega_sq / gain
    return (a0, 2.0 * a0, a0), (0.0, b1, b2)


def highpass_coefficients(relative_cutoff: float) -> Optional[Coefficients]:
    """Complementary high-pass biquad sharing the low-pass denominator."""

    cutoff = clamp_relative_cutoff(relative_cutoff)
    if cutoff is None:
        return None
    _, gain, b1, b2 = _denominator(cutoff)
    return (4.0 / gain, -8.0 / gain, 4.0 / gain), (0.0, b1, b2)
