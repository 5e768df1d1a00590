"""Configuration types shared by the command line, the inputs and the writers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional

PRESETS_FILENAME = "iq_resample_tool_presets.conf"


class ConfigError(ValueError):
    """Raised when options are missing, conflicting or invalid."""


class SampleFormat(enum.Enum):
    """Complex sample formats understood for input and output."""

    CS8 = "cs8"
    CU8 = "cu8"
    CS16 = "cs16"
    CU16 = "cu16"
    CS32 = "cs32"
    CU32 = "cu32"
    CF32 = "cf32"
    SC16Q11 = "sc16q11"


_BYTES_PER_SAMPLE = {
    SampleFormat.CS8: 2,
    SampleFormat.CU8: 2,
    SampleFormat.CS16: 4,
    SampleFormat.CU16: 4,
    SampleFormat.SC16Q11: 4,
    SampleFormat.CS32: 8,
    SampleFormat.CU32: 8,
    SampleFormat.CF32: 8,
}


class OutputType(enum.Enum):
    """Container written around the output samples."""

    RAW = "raw"
    WAV = "wav"
    WAV_RF64 = "wav-rf64"


class FrequencyShiftRequestType(enum.Enum):
    """Where a requested frequency shift came from."""

    NONE = enum.auto()
    MANUAL = enum.auto()
    METADATA_CALC_TARGET = enum.auto()


@dataclass
class PresetDefinition:
    """A named set of output settings; ``None`` means the preset leaves it alone."""

    name: str
    description: str = ""
    target_rate: float = 0.0
    sample_format_name: Optional[str] = None
    output_type: OutputType = OutputType.RAW
    gain: Optional[float] = None
    dc_block: Optional[bool] = None
    iq_correction: Optional[bool] = None


@dataclass
class AppConfig:
    """Everything the command line asked for, plus the values resolved from it."""

    # Values given on the command line.
    input_type: Optional[str] = None
    input_filename: Optional[str] = None
    output_filename: Optional[str] = None
    output_to_stdout: bool = False
    output_type_name: Optional[str] = None
    sample_type_name: Optional[str] = None
    output_rate_arg: float = 0.0
    gain: float = 1.0
    freq_shift_hz_arg: float = 0.0
    shift_after_resample: bool = False
    no_resample: bool = False
    raw_passthrough: bool = False
    iq_correction: bool = False
    dc_block: bool = False
    preset_name: Optional[str] = None
    rf_freq_hz_arg: float = 0.0
    bias_t: bool = False
    presets: list[PresetDefinition] = field(default_factory=list)

    # Values resolved during validation.
    target_rate: float = 0.0
    user_rate_provided: bool = False
    output_type: OutputType = OutputType.RAW
    output_type_provided: bool = False
    output_format: Optional[SampleFormat] = None
    rf_freq_hz: float = 0.0
    rf_freq_provided: bool = False
    frequency_shift_request: FrequencyShiftRequestType = FrequencyShiftRequestType.NONE
    frequency_shift_value: float = 0.0
    freq_shift_requested: bool = False
    freq_shift_hz: float = 0.0
    set_center_frequency_target_hz: bool = False
    center_frequency_target_hz: float = 0.0

    # Per-input option objects, keyed by input module name.
    input_options: dict[str, Any] = field(default_factory=dict)


def parse_sample_format(name: str) -> SampleFormat:
    """Return the sample format called ``name`` (case-insensitive)."""
    try:
        return SampleFormat(name.strip().lower())
    except ValueError:
        raise ConfigError(f"Invalid sample format '{name}'.") from None


def bytes_per_sample(sample_format: SampleFormat) -> int:
    """Return the size in bytes of one I/Q sample pair."""
    return _BYTES_PER_SAMPLE[sample_format]