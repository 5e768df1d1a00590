# iqresample

A command-line tool and a library for handling I/Q sample streams. The
command reads a full I/Q command line and checks it. It can copy a headerless
I/Q file unchanged to a raw file, a WAV/RF64 file or standard output. The
library has the parts for the rest of the job: sample format tables, a DC
blocking filter, raw and WAV/RF64 writers, a raw file reader, and option
handling for RTL-SDR, HackRF and BladeRF receivers.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
iqresample -i <type> [input_file] [options]
iqresample --help
```

`--help` prints every option and exits with status 0.

The input types are `raw-file`, `rtlsdr`, `hackrf` and `bladerf`. The
`raw-file` input needs one file path and also these options:
`--raw-file-input-rate` and `--raw-file-input-sample-format`. The SDR inputs
take no file path and need `--rf-freq`.

The output goes to a file (`-f`/`--file`) or to standard output
(`-o`/`--stdout`). Give exactly one of them.

The command applies these checks and defaults:

- `--output-container raw|wav|wav-rf64`: the default is `wav-rf64` for file
  output and `raw` for `--stdout`. WAV containers cannot be used with
  `--stdout`, and they accept only `cs16` or `cu8` samples.
- `--output-sample-format`: `cs8`, `cu8`, `cs16`, `cu16`, `cs32`, `cu32`,
  `cf32` or `sc16q11`. For file output the default is `cs16`. With
  `--stdout` this option is required.
- `--output-rate` is required unless `--no-resample` or a preset is used.
  `--output-rate`, `--preset` and `--no-resample` exclude one another.
- `--raw-passthrough` turns `--no-resample` on. It cannot be combined with
  `--freq-shift`, `--iq-correction` or `--dc-block`.
- `--shift-after-resample` needs `--freq-shift`. `--iq-correction` needs
  `--dc-block`.
- Each SDR type has its own checked options, for example `--rtlsdr-gain`,
  `--hackrf-lna-gain` (0–40 in steps of 8) and `--bladerf-sample-rate`.

A run that does work: copy a cs16 file unchanged into a WAV file.

```
iqresample -i raw-file capture.cs16 \
    --raw-file-input-rate 2e6 --raw-file-input-sample-format cs16 \
    --raw-passthrough --output-sample-format cs16 \
    --output-container wav -f out.wav
```

The input and output sample formats must match. If no output rate is given,
the WAV header takes the input's rate. If the output file already exists, you
are asked before it is overwritten. On success the exit status is 0. Any
error is printed to standard error and the exit status is 1.

## What the package does not do

- The command does not resample, shift frequency, apply gain, remove DC or
  correct I/Q imbalance. These options are parsed and checked. After that,
  any run other than `raw-file` with `--raw-passthrough` stops with an error.
- The package does not talk to SDR hardware. For the `rtlsdr`, `hackrf` and
  `bladerf` inputs it only checks options and provides helpers: transfer
  chunking, transfer profiles and FPGA file lookup.
- There is no `wav` input type.
- The command loads no preset file, so `--preset` always reports an unknown
  preset. Library callers can fill `AppConfig.presets` themselves.

## Library

- `iqresample.config`: `AppConfig`, `PresetDefinition`, `SampleFormat`,
  `OutputType`, `parse_sample_format()`, `bytes_per_sample()`, and
  `ConfigError`.
- `iqresample.optparser`: `ArgumentParser`, `Option`, `OptionType`,
  `ParseResult` and `ArgumentError`. This is a small parser with
  `--name=value`, bundled short options and `--no-` negation.
- `iqresample.cli`:
  - `parse_arguments(argv, config)` fills and checks an `AppConfig`. It
    returns `False` if help was shown.
  - `build_options(config)` and `format_help(config)` give the option list
    and the help text.
  - `main(argv=None)` runs the command.
- `iqresample.dc_block.DCBlocker(sample_rate, cutoff_hz)` is a first-order DC
  blocking filter. `process(samples)` returns complex64 and keeps its state
  between calls. `reset()` clears that state.
- `iqresample.file_writer`:
  - `open_writer(config, confirm_overwrite=None)` returns the writer that
    `config` asks for.
  - `RawFileWriter` and `WavFileWriter` can also be made directly. Both are
    context managers and count `total_bytes_written`.
- `iqresample.rawfile`:
  - `RawFileSource(path, sample_format, sample_rate)` is a context manager.
    `chunks(chunk_frames)` yields blocks of bytes, and `summary()` describes
    the input.
  - `RawFileOptions` holds and checks the raw file input options.
- `iqresample.rtlsdr`: `RtlSdrOptions`, `tuner_name()` and
  `chunk_transfer()`.
- `iqresample.hackrf`: `HackRfOptions` and `split_transfer()`.
- `iqresample.bladerf_options`: `BladeRfOptions`,
  `select_transfer_profile()`, `samples_per_transfer()` and
  `read_usbfs_memory_mb()`.
- `iqresample.bladerf_fpga`: `fpga_filename()`, `fpga_search_paths()`,
  `find_fpga_file()` and `board_display_name()`.
- `iqresample.input_manager`: `all_input_modules()`,
  `find_input_module()`, `is_sdr_input()` and `apply_defaults()`.