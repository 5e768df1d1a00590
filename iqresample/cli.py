"""Command-line parsing, validation and the program entry point."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Sequence

from .config import (
    PRESETS_FILENAME,
    AppConfig,
    ConfigError,
    FrequencyShiftRequestType,
    OutputType,
    SampleFormat,
    parse_sample_format,
)
from .file_writer import open_writer
from .input_manager import all_input_modules, find_input_module, is_sdr_input
from .optparser import ArgumentError, ArgumentParser, Option, OptionType
from .rawfile import RawFileSource

logger = logging.getLogger(__name__)

USAGE = "iq_resample_tool -i <type> [input_file] [options]"
DESCRIPTION = (
    "\nResamples an I/Q file or a stream from an SDR device to a specified "
    "format and sample rate."
)

_FILE_INPUTS = ("wav", "raw-file")
_WAV_TYPES = (OutputType.WAV, OutputType.WAV_RF64)
_WAV_FORMATS = (SampleFormat.CS16, SampleFormat.CU8)
_PASSTHROUGH_CHUNK_FRAMES = 131072


class _HelpRequested(Exception):
    """Raised by the help option to stop parsing at once."""


def _help_callback(parser: ArgumentParser, option: Option) -> None:
    raise _HelpRequested


def _generic_options() -> list[Option]:
    group, boolean, flt, string = (
        OptionType.GROUP,
        OptionType.BOOLEAN,
        OptionType.FLOAT,
        OptionType.STRING,
    )
    return [
        Option(group, help="Required Input & Output"),
        Option(string, short_name="i", long_name="input", dest="input_type",
               help="Specifies the input type {wav|raw-file|rtlsdr|sdrplay|hackrf|bladerf}"),
        Option(string, short_name="f", long_name="file", dest="output_filename",
               help="Output to a file."),
        Option(boolean, short_name="o", long_name="stdout", dest="output_to_stdout",
               help="Output binary data for piping to another program."),
        Option(group, help="Output Options"),
        Option(string, long_name="output-container", dest="output_type_name",
               help="Specifies the output file container format {raw|wav|wav-rf64}"),
        Option(string, long_name="output-sample-format", dest="sample_type_name",
               help="Sample format for output data {cs8|cu8|cs16|...}"),
        Option(group, help="Processing Options"),
        Option(flt, long_name="output-rate", dest="output_rate_arg",
               help="Output sample rate in Hz. (Required if no preset is used)"),
        Option(flt, long_name="gain", dest="gain", default=1.0,
               help="Apply a linear gain multiplier to the samples (Default: 1.0)"),
        Option(flt, long_name="freq-shift", dest="freq_shift_hz_arg",
               help="Apply a direct frequency shift in Hz (e.g., -100e3)"),
        Option(boolean, long_name="shift-after-resample", dest="shift_after_resample",
               help="Apply frequency shift AFTER resampling (default is before)"),
        Option(boolean, long_name="no-resample", dest="no_resample",
               help="Process at native input rate. Bypasses the resampler but applies all other DSP."),
        Option(boolean, long_name="raw-passthrough", dest="raw_passthrough",
               help="Bypass all processing. Copies raw input bytes directly to output."),
        Option(boolean, long_name="iq-correction", dest="iq_correction",
               help="(Optional) Enable automatic I/Q imbalance correction."),
        Option(boolean, long_name="dc-block", dest="dc_block",
               help="(Optional) Enable DC offset removal (high-pass filter)."),
        Option(string, long_name="preset", dest="preset_name",
               help="Use a preset for a common target."),
    ]


def _sdr_general_options() -> list[Option]:
    return [
        Option(OptionType.GROUP, help="SDR General Options"),
        Option(OptionType.FLOAT, long_name="rf-freq", dest="rf_freq_hz_arg",
               help="(Required for SDR) Tuner center frequency in Hz (e.g., 97.3e6)"),
        Option(OptionType.BOOLEAN, long_name="bias-t", dest="bias_t",
               help="(Optional) Enable Bias-T power."),
    ]


def build_options(config: AppConfig) -> list[Option]:
    """Return every command-line option, including one entry per preset."""
    options = _generic_options()
    if any(module.is_sdr for module in all_input_modules()):
        options.extend(_sdr_general_options())
    for module in all_input_modules():
        options.extend(module.cli_options())
    if config.presets:
        options.append(Option(OptionType.GROUP, help="Available Presets:"))
        options.extend(
            Option(OptionType.BOOLEAN, long_name=preset.name, help=preset.description, no_prefix=True)
            for preset in config.presets
        )
    options.append(Option(OptionType.GROUP, help="Help"))
    options.append(
        Option(OptionType.BOOLEAN, short_name="h", long_name="help",
               help="show this help message and exit",
               callback=_help_callback, no_negation=True)
    )
    return options


def _make_parser(config: AppConfig) -> ArgumentParser:
    return ArgumentParser(build_options(config), usages=[USAGE], description=DESCRIPTION)


def format_help(config: AppConfig) -> str:
    """Return the full usage text."""
    return _make_parser(config).format_usage()


def _ensure_input_options(config: AppConfig) -> None:
    for module in all_input_modules():
        if module.make_options is not None and module.name not in config.input_options:
            config.input_options[module.name] = module.make_options()


def _assign(target: Any, name: str, value: Any) -> None:
    if isinstance(getattr(target, name), bool):
        value = bool(value)
    setattr(target, name, value)


def _store_values(values: dict[str, Any], config: AppConfig) -> None:
    prefixes = [(m.name.replace("-", "_") + "_", m.name) for m in all_input_modules()]
    for dest, value in values.items():
        if hasattr(config, dest):
            _assign(config, dest, value)
            continue
        for prefix, name in prefixes:
            target = config.input_options.get(name)
            if target is None or not dest.startswith(prefix):
                continue
            field_name = dest[len(prefix):]
            if hasattr(target, field_name):
                _assign(target, field_name, value)
                break


def parse_arguments(argv: Sequence[str], config: AppConfig) -> bool:
    """Parse and validate ``argv`` (without the program name) into ``config``.

    Returns False if help was requested (the help text is printed), True
    otherwise. Raises ArgumentError for bad syntax and ConfigError for
    missing, conflicting or invalid options.
    """
    _ensure_input_options(config)
    parser = _make_parser(config)
    try:
        result = parser.parse(list(argv))
    except _HelpRequested:
        sys.stdout.write(parser.format_usage())
        return False
    _store_values(result.values, config)
    _validate_and_process(config, result.args)
    return True


def _validate_and_process(config: AppConfig, args: list[str]) -> None:
    if not config.input_type:
        raise ConfigError("missing required argument --input <type>")

    module = find_input_module(config.input_type)
    if module is None:
        raise ConfigError(f"Invalid input type '{config.input_type}'.")

    if config.input_type.lower() in _FILE_INPUTS:
        if not args:
            raise ConfigError(f"Missing <file_path> argument for '--input {config.input_type}'.")
        if len(args) > 1:
            raise ConfigError(
                "Unexpected non-option arguments found. Only one input file path is allowed."
            )
        config.input_filename = args[0]
    elif args:
        raise ConfigError(f"Unexpected non-option argument '{args[0]}' found for non-file input.")

    config.frequency_shift_request = FrequencyShiftRequestType.NONE

    module_options = config.input_options.get(module.name)
    if module_options is not None and hasattr(module_options, "validate"):
        module_options.validate()

    _validate_output_destination(config)
    _validate_output_type_and_sample_format(config)
    _validate_sdr_general_options(config)
    _resolve_frequency_shift_options(config)

    if config.user_rate_provided and config.preset_name:
        raise ConfigError("Option --output-rate cannot be used with --preset.")
    if config.no_resample:
        if config.user_rate_provided:
            raise ConfigError("Option --no-resample cannot be used with --output-rate.")
        if config.preset_name:
            raise ConfigError("Option --no-resample cannot be used with --preset.")
    if config.raw_passthrough:
        if not config.no_resample:
            logger.warning("Option --raw-passthrough implies --no-resample. Forcing resampler off.")
            config.no_resample = True
        if config.freq_shift_requested:
            raise ConfigError("Option --raw-passthrough cannot be used with frequency shifting options.")
        if config.iq_correction:
            raise ConfigError("Option --raw-passthrough cannot be used with --iq-correction.")
        if config.dc_block:
            raise ConfigError("Option --raw-passthrough cannot be used with --dc-block.")
    if config.target_rate <= 0 and not config.no_resample:
        raise ConfigError(
            "Missing required argument: you must specify an --output-rate or use a preset."
        )

    if config.iq_correction and not config.dc_block:
        raise ConfigError(
            "Option --iq-correction requires --dc-block to be enabled for optimal "
            "performance and stability."
        )


def _resolve_frequency_shift_options(config: AppConfig) -> None:
    if config.freq_shift_hz_arg != 0.0:
        if config.frequency_shift_request is not FrequencyShiftRequestType.NONE:
            raise ConfigError(
                "Conflicting frequency shift options provided. Cannot use --freq-shift "
                "and --wav-center-target-freq at the same time."
            )
        config.frequency_shift_request = FrequencyShiftRequestType.MANUAL
        config.frequency_shift_value = float(config.freq_shift_hz_arg)

    request = config.frequency_shift_request
    if request is FrequencyShiftRequestType.NONE:
        config.freq_shift_requested = False
    elif request is FrequencyShiftRequestType.MANUAL:
        config.freq_shift_requested = True
        config.freq_shift_hz = config.frequency_shift_value
    elif request is FrequencyShiftRequestType.METADATA_CALC_TARGET:
        config.freq_shift_requested = True
        config.set_center_frequency_target_hz = True
        config.center_frequency_target_hz = config.frequency_shift_value

    if config.shift_after_resample and not config.freq_shift_requested:
        raise ConfigError(
            "Option --shift-after-resample was used, but no frequency shift was requested."
        )


def _validate_output_destination(config: AppConfig) -> None:
    if config.output_to_stdout and config.output_filename:
        raise ConfigError("Options --stdout and --file <file> are mutually exclusive.")
    if not config.output_to_stdout and not config.output_filename:
        raise ConfigError("Must specify an output destination: --stdout or --file <file>.")


def _apply_preset(config: AppConfig) -> None:
    wanted = config.preset_name.lower()
    preset = next((p for p in config.presets if p.name.lower() == wanted), None)
    if preset is None:
        raise ConfigError(
            f"Unknown preset '{config.preset_name}'. Check '{PRESETS_FILENAME}' "
            "or --help for available presets."
        )
    config.target_rate = preset.target_rate
    if not config.sample_type_name:
        config.sample_type_name = preset.sample_format_name
    if not config.output_type_name:
        config.output_type = preset.output_type
        config.output_type_provided = True
    if preset.gain is not None and config.gain == 1.0:
        config.gain = preset.gain
    if preset.dc_block is not None and not config.dc_block:
        config.dc_block = preset.dc_block
    if preset.iq_correction is not None and not config.iq_correction:
        config.iq_correction = preset.iq_correction


def _validate_output_type_and_sample_format(config: AppConfig) -> None:
    if config.preset_name:
        _apply_preset(config)

    if config.output_type_name:
        config.output_type_provided = True
        try:
            config.output_type = OutputType(config.output_type_name.lower())
        except ValueError:
            raise ConfigError(
                f"Invalid output type '{config.output_type_name}'. "
                "Must be 'raw', 'wav', or 'wav-rf64'."
            ) from None
    elif not config.output_type_provided:
        config.output_type = OutputType.RAW if config.output_to_stdout else OutputType.WAV_RF64

    if config.output_rate_arg > 0.0:
        config.target_rate = float(config.output_rate_arg)
        config.user_rate_provided = True

    if not config.sample_type_name:
        if config.output_filename and not config.output_to_stdout:
            config.sample_type_name = "cs16"
        else:
            raise ConfigError(
                "Missing required argument: you must specify an --output-sample-format or use a preset."
            )

    try:
        config.output_format = parse_sample_format(config.sample_type_name)
    except ConfigError:
        raise ConfigError(
            f"Invalid sample format '{config.sample_type_name}'. See --help for valid formats."
        ) from None

    if config.output_to_stdout and config.output_type in _WAV_TYPES:
        raise ConfigError("Invalid option: WAV/RF64 container format cannot be used with --stdout.")

    if config.output_type in _WAV_TYPES and config.output_format not in _WAV_FORMATS:
        raise ConfigError(
            f"Invalid sample format '{config.sample_type_name}' for WAV container. "
            "Only 'cs16' and 'cu8' are supported for WAV output."
        )


def _validate_sdr_general_options(config: AppConfig) -> None:
    is_sdr = is_sdr_input(config.input_type)
    if config.rf_freq_hz_arg > 0.0:
        config.rf_freq_hz = float(config.rf_freq_hz_arg)
        config.rf_freq_provided = True
    if is_sdr and not config.rf_freq_provided:
        raise ConfigError("Option '--rf-freq' is required for SDR inputs.")
    if not is_sdr:
        if config.rf_freq_provided:
            raise ConfigError("Option '--rf-freq' is only valid for SDR inputs.")
        if config.bias_t:
            raise ConfigError("Option '--bias-t' is only valid for SDR inputs.")


def _run_raw_passthrough(config: AppConfig) -> int:
    options = config.input_options["raw-file"]
    with RawFileSource(config.input_filename, options.format_str, options.sample_rate_hz) as source:
        if source.sample_format is not config.output_format:
            raise ConfigError(
                "Option --raw-passthrough requires input and output formats to be identical. "
                f"Input format is '{options.format_str}', output format is '{config.sample_type_name}'."
            )
        for label, value in source.summary():
            logger.info("%s: %s", label, value)
        if config.target_rate <= 0:
            config.target_rate = float(source.sample_rate)
        with open_writer(config) as writer:
            for block in source.chunks(_PASSTHROUGH_CHUNK_FRAMES):
                writer.write(block)
            logger.info("Wrote %d bytes.", writer.total_bytes_written)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command; return the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    config = AppConfig()
    try:
        if not parse_arguments(args, config):
            return 0
    except ArgumentError as exc:
        sys.stderr.write(f"error: {exc}\n")
        if exc.usage:
            sys.stdout.write(exc.usage)
        return 1
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1

    if config.input_type.lower() == "raw-file" and config.raw_passthrough:
        try:
            return _run_raw_passthrough(config)
        except (ConfigError, OSError) as exc:
            sys.stderr.write(f"error: {exc}\n")
            return 1

    sys.stderr.write(
        "error: this command can only copy raw-file input with --raw-passthrough; "
        "the requested processing is not available.\n"
    )
    return 1