"""Locating BladeRF FPGA bitstreams and naming BladeRF boards."""

from __future__ import annotations

import enum
import logging
import os
from typing import Optional, Union

logger = logging.getLogger(__name__)

APP_NAME = "iq_resample_tool"


class FpgaSize(enum.IntEnum):
    """FPGA variants fitted to BladeRF boards, as reported by the device."""

    UNKNOWN = 0
    KLE40 = 40
    A4 = 49
    A5 = 77
    KLE115 = 115
    A9 = 301


_FPGA_FILENAMES = {
    FpgaSize.KLE40: "hostedx40.rbf",
    FpgaSize.KLE115: "hostedx115.rbf",
    FpgaSize.A4: "hostedxA4.rbf",
    FpgaSize.A5: "hostedxA5.rbf",
    FpgaSize.A9: "hostedxA9.rbf",
}


def fpga_filename(fpga_size: Union[FpgaSize, int]) -> str:
    """Return the bitstream file name for an FPGA size; raise ValueError if unknown."""
    try:
        size = FpgaSize(fpga_size)
    except ValueError:
        size = None
    name = _FPGA_FILENAMES.get(size) if size is not None else None
    if name is None:
        raise ValueError(
            f"Unknown or unsupported BladeRF FPGA size ({int(fpga_size)}). "
            "Cannot determine FPGA file."
        )
    return name


def _dirname(path: str) -> str:
    return os.path.dirname(path) or "."


def fpga_search_paths(exe_path: Optional[str] = None) -> list[str]:
    """Return the directories searched for bitstreams, in order.

    They are ``fpga/bladerf`` beside the executable, in its parent directory,
    and under the system-wide share directories. Without an executable path
    the current and parent directories stand in.
    """
    if exe_path:
        exe_dir = _dirname(exe_path)
        parent_dir = _dirname(exe_dir)
    else:
        exe_dir = "."
        parent_dir = ".."
    bases = [
        exe_dir,
        parent_dir,
        f"/usr/local/share/{APP_NAME}",
        f"/usr/share/{APP_NAME}",
    ]
    return [f"{base}/fpga/bladerf" for base in bases]


def find_fpga_file(fpga_size: Union[FpgaSize, int], exe_path: Optional[str] = None) -> str:
    """Return the path of the first bitstream found for ``fpga_size``.

    Raises ValueError for an unknown size and FileNotFoundError when no
    search directory holds the file.
    """
    filename = fpga_filename(fpga_size)
    for directory in fpga_search_paths(exe_path):
        candidate = f"{directory}/{filename}"
        if os.path.exists(candidate):
            logger.info("Found FPGA file at: %s", candidate)
            return candidate
    raise FileNotFoundError(
        f"Could not automatically find the required FPGA file '{filename}'. "
        "Please ensure the FPGA files are in the 'fpga/bladerf' subdirectory next to "
        "the executable, or installed system-wide."
    )


def board_display_name(board_name: str, serial: str) -> str:
    """Return a friendly name for a board, including its serial number."""
    if board_name == "bladerf2":
        friendly = "Nuand BladeRF 2"
    elif board_name == "bladerf":
        friendly = "Nuand BladeRF 1"
    else:
        friendly = "Nuand BladeRF"
    return f"{friendly} (S/N: {serial})"