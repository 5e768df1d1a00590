"""HackRF input options and transfer splitting."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from .config import ConfigError
from .optparser import Option, OptionType

logger = logging.getLogger(__name__)

HACKRF_DEFAULT_SAMPLE_RATE = 8e6
HACKRF_DEFAULT_LNA_GAIN = 16
HACKRF_DEFAULT_VGA_GAIN = 0
HACKRF_MIN_SAMPLE_RATE = 2e6
HACKRF_MAX_SAMPLE_RATE = 20e6


@dataclass
class HackRfOptions:
    """HackRF settings as given on the command line, plus what was resolved."""

    sample_rate_hz_arg: float = 0.0
    lna_gain_arg: int = HACKRF_DEFAULT_LNA_GAIN
    vga_gain_arg: int = HACKRF_DEFAULT_VGA_GAIN
    amp_enable: bool = False

    sample_rate_hz: float = HACKRF_DEFAULT_SAMPLE_RATE
    lna_gain: int = HACKRF_DEFAULT_LNA_GAIN
    vga_gain: int = HACKRF_DEFAULT_VGA_GAIN
    sample_rate_provided: bool = False
    lna_gain_provided: bool = False
    vga_gain_provided: bool = False

    def validate(self) -> None:
        """Resolve gains and sample rate; raise ConfigError on invalid values."""
        if self.lna_gain_arg != HACKRF_DEFAULT_LNA_GAIN:
            lna = int(self.lna_gain_arg)
            if lna < 0 or lna > 40 or lna % 8 != 0:
                raise ConfigError(f"Invalid LNA gain {lna} dB. Must be 0-40 in 8 dB steps.")
            self.lna_gain = lna
            self.lna_gain_provided = True

        if self.vga_gain_arg != HACKRF_DEFAULT_VGA_GAIN:
            vga = int(self.vga_gain_arg)
            if vga < 0 or vga > 62 or vga % 2 != 0:
                raise ConfigError(f"Invalid VGA gain {vga} dB. Must be 0-62 in 2 dB steps.")
            self.vga_gain = vga
            self.vga_gain_provided = True

        if self.sample_rate_hz_arg != 0.0:
            rate = float(self.sample_rate_hz_arg)
            if rate < HACKRF_MIN_SAMPLE_RATE or rate > HACKRF_MAX_SAMPLE_RATE:
                raise ConfigError(
                    f"Invalid HackRF sample rate {rate:.0f} Hz. "
                    "Must be between 2,000,000 and 20,000,000."
                )
            self.sample_rate_hz = rate
            self.sample_rate_provided = True

    @property
    def effective_sample_rate(self) -> float:
        """The sample rate the device is set to."""
        return self.sample_rate_hz if self.sample_rate_provided else HACKRF_DEFAULT_SAMPLE_RATE

    def summary(self, sample_rate: int, rf_freq_hz: float, bias_t: bool) -> list[tuple[str, str]]:
        """Return (label, value) pairs describing this input."""
        return [
            ("Input Source", "HackRF One"),
            ("Input Format", "8-bit Signed Complex (cs8)"),
            ("Input Rate", f"{int(sample_rate)} Hz"),
            ("RF Frequency", f"{rf_freq_hz:.0f} Hz"),
            ("Gain", f"LNA: {self.lna_gain} dB, VGA: {self.vga_gain} dB"),
            ("RF Amp", "Enabled" if self.amp_enable else "Disabled"),
            ("Bias-T", "Enabled" if bias_t else "Disabled"),
        ]


def hackrf_cli_options() -> list[Option]:
    """Return the HackRF specific command-line options."""
    return [
        Option(OptionType.GROUP, help="HackRF-Specific Options"),
        Option(
            OptionType.FLOAT,
            long_name="hackrf-sample-rate",
            dest="hackrf_sample_rate_hz_arg",
            help="Set sample rate in Hz. (Optional, Default: 8e6)",
        ),
        Option(
            OptionType.INTEGER,
            long_name="hackrf-lna-gain",
            dest="hackrf_lna_gain_arg",
            default=HACKRF_DEFAULT_LNA_GAIN,
            help="Set LNA (IF) gain in dB. (Optional, Default: 16)",
        ),
        Option(
            OptionType.INTEGER,
            long_name="hackrf-vga-gain",
            dest="hackrf_vga_gain_arg",
            default=HACKRF_DEFAULT_VGA_GAIN,
            help="Set VGA (Baseband) gain in dB. (Optional, Default: 0)",
        ),
        Option(
            OptionType.BOOLEAN,
            long_name="hackrf-amp-enable",
            dest="hackrf_amp_enable",
            help="Enable the front-end RF amplifier (+14 dB).",
        ),
    ]


def split_transfer(data, bytes_per_frame: int, max_frames: int) -> Iterator[tuple[bytes, int]]:
    """Split one device transfer into pipeline-sized chunks.

    Yields each chunk's bytes and the number of whole frames in it; no chunk
    is longer than ``max_frames`` frames.
    """
    if bytes_per_frame <= 0:
        raise ValueError(f"bytes_per_frame must be positive, got {bytes_per_frame}")
    if max_frames <= 0:
        raise ValueError(f"max_frames must be positive, got {max_frames}")
    raw = bytes(memoryview(data).cast("B"))
    limit = max_frames * bytes_per_frame
    for start in range(0, len(raw), limit):
        chunk = raw[start:start + limit]
        yield chunk, len(chunk) // bytes_per_frame