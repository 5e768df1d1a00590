import pytest

from iqresample.bladerf_options import BladeRfOptions
from iqresample.config import AppConfig
from iqresample.hackrf import HackRfOptions
from iqresample.input_manager import (
    all_input_modules,
    apply_defaults,
    find_input_module,
    is_sdr_input,
)
from iqresample.optparser import OptionType
from iqresample.rawfile import RawFileOptions
from iqresample.rtlsdr import RtlSdrOptions


def test_module_names_in_order():
    names = [m.name for m in all_input_modules()]
    assert names == ["raw-file", "rtlsdr", "hackrf", "bladerf"]


def test_module_names_unique():
    names = [m.name for m in all_input_modules()]
    assert len(set(names)) == len(names)


@pytest.mark.parametrize("name", ["raw-file", "RAW-FILE", "RtlSdr", "hackrf", "BLADERF"])
def test_find_is_case_insensitive(name):
    module = find_input_module(name)
    assert module.name == name.lower()


@pytest.mark.parametrize("name", ["nonsense", "", None])
def test_find_unknown(name):
    assert find_input_module(name) is None


@pytest.mark.parametrize(
    "name, expected",
    [
        ("raw-file", False),
        ("rtlsdr", True),
        ("HackRF", True),
        ("bladerf", True),
        ("nonsense", False),
        (None, False),
    ],
)
def test_is_sdr_input(name, expected):
    assert is_sdr_input(name) is expected


def test_cli_options_start_with_group():
    for module in all_input_modules():
        options = module.cli_options()
        assert options[0].type is OptionType.GROUP
        assert all(o.long_name for o in options[1:])


def test_apply_defaults():
    config = AppConfig()
    apply_defaults(config)
    assert isinstance(config.input_options["raw-file"], RawFileOptions)
    assert isinstance(config.input_options["rtlsdr"], RtlSdrOptions)
    assert isinstance(config.input_options["hackrf"], HackRfOptions)
    assert isinstance(config.input_options["bladerf"], BladeRfOptions)
    assert config.input_options["rtlsdr"].sample_rate_hz == 2.4e6
    assert config.input_options["hackrf"].lna_gain == 16
    assert config.input_options["bladerf"].bandwidth_hz == 0


def test_apply_defaults_gives_fresh_objects():
    first = AppConfig()
    second = AppConfig()
    apply_defaults(first)
    apply_defaults(second)
    first.input_options["rtlsdr"].ppm = 5
    assert second.input_options["rtlsdr"].ppm == 0