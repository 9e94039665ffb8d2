"""Single-channel signal conditioning for control loops."""

from importlib.metadata import PackageNotFoundError, version

from .processor import (
    MAX_OFFSET_SAMPLES,
    ProcessingPhase,
    ProcessorFlags,
    SignalLimits,
    SignalProcessor,
)

try:  # pragma: no cover - fallback when package metadata missing
    __version__ = version("sigproc")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "MAX_OFFSET_SAMPLES",
    "ProcessingPhase",
    "ProcessorFlags",
    "SignalLimits",
    "SignalProcessor",
]
