from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .processor import MAX_OFFSET_SAMPLES, ProcessorFlags, SignalProcessor


@dataclass
class FilterConfig:
    min_frequency: Optional[float] = None  # high-pass, fraction of fs
    max_frequency: Optional[float] = None  # low-pass, fraction of fs


@dataclass
class ReplayRuntime:
    batch_size: int = 1
    offset_samples: int = 0
    calibration_samples: int = 0


@dataclass
class ProcessorConfig:
    rectify: bool = False
    normalize: bool = False
    input_gain: float = 1.0
    max_offset_samples: int = MAX_OFFSET_SAMPLES
    filters: FilterConfig = field(default_factory=FilterConfig)
    replay: ReplayRuntime = field(default_factory=ReplayRuntime)

    @property
    def flags(self) -> ProcessorFlags:
        flags = ProcessorFlags.NONE
        if self.rectify:
            flags |= ProcessorFlags.RECTIFY
        if self.normalize:
            flags |= ProcessorFlags.NORMALIZE
        return flags


PRESETS: Dict[str, Dict[str, Any]] = {
    "emg": {
        "rectify": True,
        "normalize": True,
        "filters": {"min_frequency": 0.02, "max_frequency": 0.005},
    },
    "force": {
        "rectify": False,
        "normalize": False,
        "filters": {"max_frequency": 0.05},
    },
    "raw": {
        "rectify": False,
        "normalize": False,
        "filters": {},
    },
}


def preset_overrides(preset: str) -> list[str]:
    data = PRESETS[preset]
    overrides = [
        f"rectify={'true' if data['rectify'] else 'false'}",
        f"normalize={'true' if data['normalize'] else 'false'}",
    ]
    for key in ("min_frequency", "max_frequency"):
        if key in data["filters"]:
            overrides.append(f"filters.{key}={data['filters'][key]}")
    return overrides


def build_processor(config: ProcessorConfig) -> SignalProcessor:
    """Create a processor with the flags, gain and cutoffs from *config*."""

    processor = SignalProcessor(config.flags, max_offset_samples=config.max_offset_samples)
    processor.set_input_gain(config.input_gain)
    if config.filters.min_frequency is not None:
        processor.set_min_frequency(config.filters.min_frequency)
    if config.filters.max_frequency is not None:
        processor.set_max_frequency(config.filters.max_frequency)
    return processor


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {**base}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = _merge(base[key], value)  # type: ignore[index]
        else:
            merged[key] = value
    return merged


def load_config(
    path: Path | str | None = None, overrides: Sequence[str] | None = None
) -> ProcessorConfig:
    """
    Load a processor configuration from JSON and apply CLI-style overrides.

    With no *path* the defaults are used as the base. Overrides are dotted
    `key=value` pairs, e.g.:
        ["filters.max_frequency=0.05", "rectify=true"]
    """
    data = _load_json(Path(path)) if path is not None else {}
    override_data: Dict[str, Any] = {}
    for override in overrides or []:
        key, raw_value = _parse_override(override)
        _assign_nested(override_data, key, raw_value)
    merged = _merge(data, override_data)
    return config_from_mapping(merged)


def config_from_mapping(merged: Dict[str, Any]) -> ProcessorConfig:
    filters_data = _section(merged, "filters")
    replay_data = _section(merged, "replay")
    replay = ReplayRuntime(
        batch_size=int(replay_data.get("batch_size", 1)),
        offset_samples=int(replay_data.get("offset_samples", 0)),
        calibration_samples=int(replay_data.get("calibration_samples", 0)),
    )
    if replay.batch_size < 1:
        raise ValueError("replay.batch_size must be >= 1")
    if replay.offset_samples < 0 or replay.calibration_samples < 0:
        raise ValueError("replay sample counts may not be negative")
    return ProcessorConfig(
        rectify=bool(merged.get("rectify", False)),
        normalize=bool(merged.get("normalize", False)),
        input_gain=float(merged.get("input_gain", 1.0)),
        max_offset_samples=int(merged.get("max_offset_samples", MAX_OFFSET_SAMPLES)),
        filters=FilterConfig(
            min_frequency=_optional_float(filters_data.get("min_frequency")),
            max_frequency=_optional_float(filters_data.get("max_frequency")),
        ),
        replay=replay,
    )


def _section(merged: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = merged.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be a mapping, got {value!r}")
    return value


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def _parse_override(item: str) -> tuple[str, Any]:
    if "=" not in item:
        raise ValueError(f"Override '{item}' must use key=value syntax")
    key, raw_value = item.split("=", 1)
    key = key.strip()
    if not key:
        raise ValueError("Override key may not be empty")
    value = _coerce_value(raw_value.strip())
    return key, value


def _coerce_value(raw: str) -> Any:
    if raw.lower() in {"true", "false"}:
        return raw.lower() == "true"
    if raw.lower() in {"null", "none"}:
        return None
    try:
        if "." in raw or "e" in raw.lower():
            return float(raw)
        return int(raw)
    except ValueError:
        pass
    if raw.startswith("[") and raw.endswith("]"):
        return json.loads(raw)
    if raw.startswith("{") and raw.endswith("}"):
        return json.loads(raw)
    return raw


def _assign_nested(target: Dict[str, Any], dotted_key: str, value: Any) -> None:
    cursor = target
    parts = dotted_key.split(".")
    for part in parts[:-1]:
        cursor = cursor.setdefault(part, {})
        if not isinstance(cursor, dict):
            raise ValueError(f"Override '{dotted_key}' conflicts with a non-mapping value")
    cursor[parts[-1]] = value
