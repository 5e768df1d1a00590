"""Registry of the available input sources."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .bladerf_options import BladeRfOptions, bladerf_cli_options
from .config import AppConfig
from .hackrf import HackRfOptions, hackrf_cli_options
from .optparser import Option
from .rawfile import RawFileOptions, rawfile_cli_options
from .rtlsdr import RtlSdrOptions, rtlsdr_cli_options


@dataclass(frozen=True)
class InputModule:
    """One input source: its name, whether it is an SDR, and its options."""

    name: str
    is_sdr: bool
    cli_options: Callable[[], list[Option]]
    make_options: Optional[Callable[[], Any]] = None


@functools.lru_cache(maxsize=None)
def all_input_modules() -> tuple[InputModule, ...]:
    """Return every registered input module, in registration order."""
    return (
        InputModule("raw-file", False, rawfile_cli_options, RawFileOptions),
        InputModule("rtlsdr", True, rtlsdr_cli_options, RtlSdrOptions),
        InputModule("hackrf", True, hackrf_cli_options, HackRfOptions),
        InputModule("bladerf", True, bladerf_cli_options, BladeRfOptions),
    )


def find_input_module(name: Optional[str]) -> Optional[InputModule]:
    """Return the module called ``name`` (case-insensitive), or None."""
    if not name:
        return None
    wanted = name.lower()
    return next((m for m in all_input_modules() if m.name.lower() == wanted), None)


def is_sdr_input(name: Optional[str]) -> bool:
    """Return True if ``name`` is a registered SDR input."""
    module = find_input_module(name)
    return module is not None and module.is_sdr


def apply_defaults(config: AppConfig) -> None:
    """Give ``config`` a default options object for each input module."""
    for module in all_input_modules():
        if module.make_options is not None:
            config.input_options[module.name] = module.make_options()