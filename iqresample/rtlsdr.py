"""RTL-SDR input options, tuner names and transfer chunking."""

from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass
from typing import Union

from .config import ConfigError
from .optparser import Option, OptionType

logger = logging.getLogger(__name__)

RTLSDR_DEFAULT_SAMPLE_RATE = 2.4e6


def _f32(value: float) -> float:
    """Round ``value`` to single precision."""
    return struct.unpack("f", struct.pack("f", value))[0]


class RtlSdrTuner(enum.IntEnum):
    """Tuner chips reported by RTL-SDR devices."""

    UNKNOWN = 0
    E4000 = 1
    FC0012 = 2
    FC0013 = 3
    FC2580 = 4
    R820T = 5
    R828D = 6


_TUNER_NAMES = {
    RtlSdrTuner.E4000: "Elonics E4000",
    RtlSdrTuner.FC0012: "Fitipower FC0012",
    RtlSdrTuner.FC0013: "Fitipower FC0013",
    RtlSdrTuner.FC2580: "Fitipower FC2580",
    RtlSdrTuner.R820T: "Rafael Micro R820T",
    RtlSdrTuner.R828D: "Rafael Micro R828D",
}


def tuner_name(tuner_type: Union[RtlSdrTuner, int]) -> str:
    """Return a human-readable name for a tuner type."""
    try:
        tuner = RtlSdrTuner(tuner_type)
    except ValueError:
        return "Unknown Tuner"
    return _TUNER_NAMES.get(tuner, "Unknown Tuner")


@dataclass
class RtlSdrOptions:
    """RTL-SDR settings as given on the command line, plus what was resolved."""

    device_index: int = 0
    sample_rate_hz: float = RTLSDR_DEFAULT_SAMPLE_RATE
    gain_db_arg: float = 0.0
    ppm: int = 0
    direct_sampling_mode: int = 0

    gain: int = 0
    gain_provided: bool = False
    sample_rate_provided: bool = False
    ppm_provided: bool = False
    direct_sampling_provided: bool = False

    def validate(self) -> None:
        """Resolve the provided flags; raise ConfigError on invalid values."""
        if self.gain_db_arg != 0.0:
            # Gain is kept in tenths of a dB, computed in single precision.
            self.gain = int(_f32(_f32(self.gain_db_arg) * _f32(10.0)))
            self.gain_provided = True

        if self.sample_rate_hz != RTLSDR_DEFAULT_SAMPLE_RATE:
            self.sample_rate_provided = True

        if self.ppm != 0:
            self.ppm_provided = True

        if self.direct_sampling_mode != 0:
            if not 1 <= self.direct_sampling_mode <= 2:
                raise ConfigError("Invalid value for --rtlsdr-direct-sampling. Must be 1 or 2.")
            self.direct_sampling_provided = True

    def summary(
        self, device_name: str, sample_rate: int, rf_freq_hz: float, bias_t: bool
    ) -> list[tuple[str, str]]:
        """Return (label, value) pairs describing this input."""
        items = [
            ("Input Source", device_name),
            ("Input Format", "8-bit Unsigned Complex (cu8)"),
            ("Input Rate", f"{int(sample_rate)} Hz"),
            ("RF Frequency", f"{rf_freq_hz:.0f} Hz"),
        ]
        if self.gain_provided:
            items.append(("Gain", f"{self.gain / 10.0:.1f} dB (Manual)"))
        else:
            items.append(("Gain", "Automatic (AGC)"))
        items.append(("Bias-T", "Enabled" if bias_t else "Disabled"))
        if self.ppm_provided:
            items.append(("PPM Correction", f"{self.ppm}"))
        return items


def rtlsdr_cli_options() -> list[Option]:
    """Return the RTL-SDR specific command-line options."""
    return [
        Option(OptionType.GROUP, help="RTL-SDR-Specific Options"),
        Option(
            OptionType.INTEGER,
            long_name="rtlsdr-device-idx",
            dest="rtlsdr_device_index",
            help="Select specific RTL-SDR device by index (0-indexed). (Default: 0)",
        ),
        Option(
            OptionType.FLOAT,
            long_name="rtlsdr-sample-rate",
            dest="rtlsdr_sample_rate_hz",
            default=RTLSDR_DEFAULT_SAMPLE_RATE,
            help="Set sample rate in Hz. (Optional, Default: 2.4e6)",
        ),
        Option(
            OptionType.FLOAT,
            long_name="rtlsdr-gain",
            dest="rtlsdr_gain_db_arg",
            help="Set manual tuner gain in dB (e.g., 28.0, 49.6). Disables AGC.",
        ),
        Option(
            OptionType.INTEGER,
            long_name="rtlsdr-ppm",
            dest="rtlsdr_ppm",
            help="Set frequency correction in parts-per-million. (Optional, Default: 0)",
        ),
        Option(
            OptionType.INTEGER,
            long_name="rtlsdr-direct-sampling",
            dest="rtlsdr_direct_sampling_mode",
            help="Enable direct sampling mode for HF reception (1=I-branch, 2=Q-branch)",
        ),
    ]


def chunk_transfer(data, bytes_per_frame: int, max_frames: int) -> tuple[bytes, int]:
    """Fit one device transfer into a pipeline buffer.

    Returns the bytes kept and the number of whole frames in them. A transfer
    larger than ``max_frames`` frames is truncated, with a warning.
    """
    if bytes_per_frame <= 0:
        raise ValueError(f"bytes_per_frame must be positive, got {bytes_per_frame}")
    raw = bytes(memoryview(data).cast("B"))
    limit = max_frames * bytes_per_frame
    if len(raw) > limit:
        logger.warning("RTL-SDR callback provided more samples than buffer can hold. Truncating.")
        raw = raw[:limit]
    return raw, len(raw) // bytes_per_frame