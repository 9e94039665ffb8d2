from __future__ import annotations

import numpy as np

from sigproc import api
from sigproc.processor import ProcessingPhase, ProcessorFlags


def test_none_handle_is_noop() -> None:
    assert api.update_signal(None, [1.0, 2.0]) == 0.0
    assert api.get_offset(None) == 0.0
    assert api.get_amplitude(None) == 0.0
    assert api.set_input_gain(None, 2.0) is None
    assert api.set_max_frequency(None, 0.1) is None
    assert api.set_min_frequency(None, 0.1) is None
    assert api.set_state(None, ProcessingPhase.OFFSET) is None
    assert api.discard(None) is None


def test_handle_round_trip() -> None:
    processor = api.create(ProcessorFlags.RECTIFY)
    api.set_input_gain(processor, 2.0)
    api.set_state(processor, ProcessingPhase.OFFSET)
    assert api.update_signal(processor, [0.5, 0.5]) == 1.0
    assert api.get_offset(processor) == 0.0
    api.set_state(processor, ProcessingPhase.MEASUREMENT)
    assert api.get_offset(processor) == 1.0
    assert api.update_signal(processor, [-1.0]) == 3.0
    assert api.get_amplitude(processor) == 1.0
    api.discard(processor)


def test_handle_configures_filters() -> None:
    processor = api.create()
    api.set_max_frequency(processor, 0.1)
    api.set_min_frequency(processor, 0.01)
    assert processor.low_pass.feedforward != (1.0, 0.0, 0.0)
    assert processor.high_pass.feedforward != (1.0, 0.0, 0.0)
    value = api.update_signal(processor, np.zeros(8))
    assert value == 0.0
