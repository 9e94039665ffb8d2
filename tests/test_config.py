from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from sigproc.config import (
    PRESETS,
    ProcessorConfig,
    build_processor,
    load_config,
    preset_overrides,
)
from sigproc.filters import highpass_coefficients, lowpass_coefficients
from sigproc.processor import ProcessorFlags


def test_load_config_overrides(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(
        """
        {
          "rectify": false,
          "normalize": true,
          "input_gain": 2.5,
          "filters": {"min_frequency": 0.01},
          "replay": {"batch_size": 4, "offset_samples": 100}
        }
        """,
        encoding="utf-8",
    )
    cfg = load_config(cfg_path, overrides=["filters.max_frequency=0.05", "rectify=true"])
    assert isinstance(cfg, ProcessorConfig)
    assert cfg.rectify
    assert cfg.normalize
    assert cfg.input_gain == 2.5
    assert cfg.filters.min_frequency == 0.01
    assert cfg.filters.max_frequency == 0.05
    assert cfg.replay.batch_size == 4
    assert cfg.replay.offset_samples == 100
    assert cfg.replay.calibration_samples == 0
    assert cfg.flags == ProcessorFlags.RECTIFY | ProcessorFlags.NORMALIZE


def test_load_config_defaults_without_file() -> None:
    cfg = load_config()
    assert cfg.flags == ProcessorFlags.NONE
    assert cfg.filters.min_frequency is None
    assert cfg.filters.max_frequency is None


def test_override_can_disable_filter(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(json.dumps({"filters": {"max_frequency": 0.1}}), encoding="utf-8")
    cfg = load_config(cfg_path, ["filters.max_frequency=none"])
    assert cfg.filters.max_frequency is None


@pytest.mark.parametrize(
    "overrides",
    [["rectify"], ["=1"], ["replay.batch_size=0"], ["replay.offset_samples=-5"]],
)
def test_invalid_config_raises(overrides: list[str]) -> None:
    with pytest.raises(ValueError):
        load_config(None, overrides)


def test_non_object_json_rejected(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_path)


@pytest.mark.parametrize(
    "overrides",
    [["filters=3"], ["replay=fast"], ["filters=3", "filters.max_frequency=0.1"]],
)
def test_non_mapping_section_rejected(overrides: list[str]) -> None:
    with pytest.raises(ValueError):
        load_config(None, overrides)


def test_preset_overrides_contains_expected_keys() -> None:
    overrides = preset_overrides("emg")
    assert "rectify=true" in overrides
    assert "normalize=true" in overrides
    assert "filters.min_frequency=0.02" in overrides
    assert "filters.max_frequency=0.005" in overrides
    assert preset_overrides("raw") == ["rectify=false", "normalize=false"]


def test_presets_defined() -> None:
    assert set(PRESETS) == {"emg", "force", "raw"}
    for name in PRESETS:
        load_config(None, preset_overrides(name))


def test_build_processor_applies_config() -> None:
    cfg = load_config(None, preset_overrides("emg") + ["input_gain=3.0", "max_offset_samples=10"])
    processor = build_processor(cfg)
    assert processor.rectify
    assert processor.normalize
    assert processor.input_gain == 3.0
    assert processor.max_offset_samples == 10
    assert np.allclose(processor.low_pass.feedforward, lowpass_coefficients(0.005)[0])
    assert np.allclose(processor.high_pass.feedforward, highpass_coefficients(0.02)[0])


def test_build_processor_skips_invalid_cutoff() -> None:
    cfg = load_config(None, ["filters.max_frequency=0.0"])
    processor = build_processor(cfg)
    assert processor.low_pass.feedforward == (1.0, 0.0, 0.0)
