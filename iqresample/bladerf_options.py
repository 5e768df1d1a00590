"""BladeRF input options, USB transfer profiles and transfer sizing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import ConfigError
from .optparser import Option, OptionType

logger = logging.getLogger(__name__)

UINT_MAX = 0xFFFFFFFF

# A requested bandwidth of zero lets the device choose one.
BLADERF_DEFAULT_SAMPLE_RATE_HZ = 0
BLADERF_DEFAULT_BANDWIDTH_HZ = 0

USBFS_MEMORY_MB_PATH = "/sys/module/usbcore/parameters/usbfs_memory_mb"
USBFS_DEFAULT_MEMORY_MB = 16

OPTIMIZED_RATE_THRESHOLD = 40_000_000
HIGHTHROUGHPUT_RATE_THRESHOLD = 5_000_000
BALANCED_RATE_THRESHOLD = 1_000_000

LINUX_OPTIMIZED_BUFFER_SIZE = 65536
LINUX_MEM_BUDGET_FACTOR = 0.5
LINUX_MAX_TRANSFERS = 64
LINUX_MIN_TRANSFERS = 16

TRANSFER_SIZE_SECONDS = 0.25
MIN_SAMPLES_PER_TRANSFER = 4096
SAMPLES_PER_TRANSFER_ALIGN = 1024


@dataclass(frozen=True)
class TransferProfile:
    """Stream buffering used with the device's synchronous interface."""

    name: str
    num_buffers: int
    buffer_size: int
    num_transfers: int


WIN_OPTIMIZED_PROFILE = TransferProfile("High-Throughput (Optimized)", 64, 131072, 32)
HIGHTHROUGHPUT_PROFILE = TransferProfile("High-Throughput", 64, 16384, 32)
BALANCED_PROFILE = TransferProfile("Balanced", 32, 8192, 16)
LOWLATENCY_PROFILE = TransferProfile("Low-Latency", 16, 2048, 8)


@dataclass
class BladeRfOptions:
    """BladeRF settings as given on the command line, plus what was resolved."""

    device_index: int = 0
    fpga_file_path: Optional[str] = None
    sample_rate_hz_arg: float = 0.0
    bandwidth_hz_arg: float = 0.0
    gain_arg: int = 0
    channel: int = 0

    sample_rate_hz: int = BLADERF_DEFAULT_SAMPLE_RATE_HZ
    bandwidth_hz: int = BLADERF_DEFAULT_BANDWIDTH_HZ
    gain: int = 0
    gain_provided: bool = False
    sample_rate_provided: bool = False
    bandwidth_provided: bool = False

    def validate(self) -> None:
        """Resolve gain, rate, bandwidth and channel; raise ConfigError on bad values."""
        if self.gain_arg != 0:
            self.gain = int(self.gain_arg)
            self.gain_provided = True

        if self.sample_rate_hz_arg == 0.0:
            raise ConfigError("Missing required argument --bladerf-sample-rate <hz>.")
        if self.sample_rate_hz_arg > UINT_MAX:
            raise ConfigError("Value for --bladerf-sample-rate is too large.")
        self.sample_rate_hz = int(self.sample_rate_hz_arg)
        self.sample_rate_provided = True

        if self.bandwidth_hz_arg != 0.0:
            if self.bandwidth_hz_arg > UINT_MAX:
                raise ConfigError("Value for --bladerf-bandwidth is too large.")
            self.bandwidth_hz = int(self.bandwidth_hz_arg)
            self.bandwidth_provided = True

        if self.channel not in (0, 1):
            raise ConfigError("Invalid value for --bladerf-channel. Must be 0 or 1.")

    def summary(
        self,
        display_name: str,
        board_name: str,
        sample_rate: int,
        rf_freq_hz: float,
        bias_t: bool,
    ) -> list[tuple[str, str]]:
        """Return (label, value) pairs describing this input."""
        items = [
            ("Input Source", display_name),
            ("Input Format", "16-bit Signed Complex Q4.11 (sc16q11)"),
        ]
        if board_name == "bladerf2":
            items.append(("Channel", f"{self.channel} (RXA)"))
        else:
            items.append(("Antenna Port", "Automatic"))
        items.append(("Input Rate", f"{int(sample_rate)} Hz"))
        items.append(("Bandwidth", f"{int(self.bandwidth_hz)} Hz"))
        items.append(("RF Frequency", f"{rf_freq_hz:.0f} Hz"))
        if self.gain_provided:
            items.append(("Gain", f"{self.gain} dB (Manual)"))
        else:
            items.append(("Gain", "Automatic (AGC)"))
        items.append(("Bias-T", "Enabled" if bias_t else "Disabled"))
        return items


def bladerf_cli_options() -> list[Option]:
    """Return the BladeRF specific command-line options."""
    return [
        Option(OptionType.GROUP, help="BladeRF-Specific Options"),
        Option(
            OptionType.INTEGER,
            long_name="bladerf-device-idx",
            dest="bladerf_device_index",
            help="Select specific BladeRF device by index (0-indexed). (Default: 0)",
        ),
        Option(
            OptionType.STRING,
            long_name="bladerf-load-fpga",
            dest="bladerf_fpga_file_path",
            help="Load an FPGA bitstream from the specified file.",
        ),
        Option(
            OptionType.FLOAT,
            long_name="bladerf-sample-rate",
            dest="bladerf_sample_rate_hz_arg",
            help="Set sample rate in Hz.",
        ),
        Option(
            OptionType.FLOAT,
            long_name="bladerf-bandwidth",
            dest="bladerf_bandwidth_hz_arg",
            help="Set analog bandwidth in Hz. (Default: Auto-selected)",
        ),
        Option(
            OptionType.INTEGER,
            long_name="bladerf-gain",
            dest="bladerf_gain_arg",
            help="Set overall manual gain in dB. Disables AGC.",
        ),
        Option(
            OptionType.INTEGER,
            long_name="bladerf-channel",
            dest="bladerf_channel",
            help="For BladeRF 2.0: Select RX channel 0 (RXA) or 1 (RXB). (Default: 0)",
        ),
    ]


def _leading_int(text: str) -> int:
    """Parse a leading decimal integer the way atoi does; 0 if there is none."""
    text = text.lstrip()
    sign = 1
    if text[:1] in ("+", "-"):
        if text[0] == "-":
            sign = -1
        text = text[1:]
    digits = ""
    for char in text:
        if not char.isdigit():
            break
        digits += char
    return sign * int(digits) if digits else 0


def read_usbfs_memory_mb(path: str = USBFS_MEMORY_MB_PATH) -> int:
    """Return the kernel's usbfs memory limit in MB, or 16 if it cannot be read."""
    try:
        with open(path, "r", encoding="ascii", errors="replace") as handle:
            line = handle.readline(31)
    except OSError:
        logger.warning("Could not read USB memory limit from sysfs. Assuming default of 16 MB.")
        return USBFS_DEFAULT_MEMORY_MB
    if not line:
        logger.warning("Could not read value from usbfs_memory_mb file. Assuming default of 16 MB.")
        return USBFS_DEFAULT_MEMORY_MB
    value = _leading_int(line)
    if value <= 0:
        logger.warning(
            "Invalid value '%s' in usbfs_memory_mb file. Assuming default of 16 MB.", line
        )
        return USBFS_DEFAULT_MEMORY_MB
    return value


def select_transfer_profile(sample_rate: int, usbfs_memory_mb: Optional[int] = None) -> TransferProfile:
    """Choose stream buffering for the actual sample rate.

    Above 40 MSPS the profile is sized from ``usbfs_memory_mb`` (the Linux
    usbfs limit); when it is None a fixed profile with large buffers is used,
    as on systems without that limit.
    """
    if sample_rate > OPTIMIZED_RATE_THRESHOLD:
        logger.debug("BladeRF: Using High-Throughput (Optimized) profile for sample rate > 40 MSPS.")
        if usbfs_memory_mb is None:
            return WIN_OPTIMIZED_PROFILE
        budget = int(usbfs_memory_mb * 1024 * 1024 * LINUX_MEM_BUDGET_FACTOR)
        transfers = budget // LINUX_OPTIMIZED_BUFFER_SIZE
        transfers = min(transfers, LINUX_MAX_TRANSFERS)
        transfers = max(transfers, LINUX_MIN_TRANSFERS)
        profile = TransferProfile(
            "High-Throughput (Optimized)", transfers, LINUX_OPTIMIZED_BUFFER_SIZE, transfers
        )
        logger.debug(
            "BladeRF: Calculated profile: num_buffers=%d, buffer_size=%d, num_transfers=%d",
            profile.num_buffers,
            profile.buffer_size,
            profile.num_transfers,
        )
        return profile
    if sample_rate >= HIGHTHROUGHPUT_RATE_THRESHOLD:
        logger.debug("BladeRF: Using High-Throughput profile for sample rate between 5 and 40 MSPS.")
        return HIGHTHROUGHPUT_PROFILE
    if sample_rate >= BALANCED_RATE_THRESHOLD:
        logger.debug("BladeRF: Using Balanced profile for sample rate between 1 and 5 MSPS.")
        return BALANCED_PROFILE
    logger.debug("BladeRF: Using Low-Latency profile for sample rate < 1 MSPS.")
    return LOWLATENCY_PROFILE


def samples_per_transfer(sample_rate: float, max_samples: int) -> int:
    """Return how many samples to request per receive call.

    The count covers a fixed time span, is capped at ``max_samples``, is at
    least 4096 and is rounded down to a multiple of 1024.
    """
    count = max(int(sample_rate * TRANSFER_SIZE_SECONDS), 0)
    count = min(count, max_samples)
    count = max(count, MIN_SAMPLES_PER_TRANSFER)
    count = (count // SAMPLES_PER_TRANSFER_ALIGN) * SAMPLES_PER_TRANSFER_ALIGN
    logger.debug("BladeRF: Using dynamic transfer size of %d samples.", count)
    return count