"""A small command-line option parser with git-style option syntax."""

from __future__ import annotations

import enum
import logging
import math
import re
import struct
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, Sequence

logger = logging.getLogger(__name__)

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_INT_RE = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_HEX_FLOAT_RE = re.compile(r"[+-]?0[xX]")


class OptionType(enum.Enum):
    GROUP = enum.auto()
    BOOLEAN = enum.auto()
    BIT = enum.auto()
    INTEGER = enum.auto()
    FLOAT = enum.auto()
    STRING = enum.auto()


@dataclass(frozen=True)
class Option:
    """One option; a GROUP option is a heading shown in the usage text."""

    type: OptionType
    long_name: Optional[str] = None
    short_name: Optional[str] = None
    dest: Optional[str] = None
    help: str = ""
    callback: Optional[Callable[["ArgumentParser", "Option"], Any]] = None
    data: int = 0
    no_negation: bool = False
    no_prefix: bool = False
    default: Any = None

    def __post_init__(self) -> None:
        if self.short_name is not None and len(self.short_name) != 1:
            raise ValueError(f"short option name must be one character: {self.short_name!r}")


@dataclass
class ParseResult:
    """Values stored by the options and the arguments that were not options."""

    values: dict[str, Any] = field(default_factory=dict)
    args: list[str] = field(default_factory=list)


class ArgumentError(Exception):
    """Raised for an unknown option or a bad option value."""

    def __init__(self, message: str, usage: Optional[str] = None) -> None:
        super().__init__(message)
        self.usage = usage


def _parse_int(text: str) -> int:
    if text == "":
        return 0
    match = _INT_RE.match(text)
    if match is None or match.end() != len(text):
        raise ValueError("expects an integer value")
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits[2:], 16)
    elif len(digits) > 1 and digits.startswith("0"):
        value = int(digits[1:], 8)
    else:
        value = int(digits, 10)
    if sign == "-":
        value = -value
    if not _INT_MIN <= value <= _INT_MAX:
        raise OverflowError("numerical result out of range")
    return value


def _parse_float(text: str) -> float:
    if text == "":
        return 0.0
    stripped = text.lstrip()
    if not stripped or stripped != stripped.rstrip() or "_" in stripped:
        raise ValueError("expects a numerical value")
    try:
        if _HEX_FLOAT_RE.match(stripped):
            value = float.fromhex(stripped)
        else:
            value = float(stripped)
    except (ValueError, OverflowError) as exc:
        if isinstance(exc, OverflowError):
            raise OverflowError("numerical result out of range") from None
        raise ValueError("expects a numerical value") from None
    if math.isinf(value) and "inf" not in stripped.lower():
        raise OverflowError("numerical result out of range")
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        raise OverflowError("numerical result out of range") from None


class ArgumentParser:
    """Parses a list of arguments against a fixed list of options."""

    def __init__(
        self,
        options: Sequence[Option],
        usages: Sequence[str] = (),
        description: Optional[str] = None,
        epilog: Optional[str] = None,
        stop_at_non_option: bool = False,
        ignore_unknown: bool = False,
    ) -> None:
        self.options = list(options)
        self.usages = list(usages)
        self.description = description
        self.epilog = epilog
        self.stop_at_non_option = stop_at_non_option
        self.ignore_unknown = ignore_unknown

    def parse(self, argv: Sequence[str]) -> ParseResult:
        """Parse ``argv`` (without the program name)."""
        result = ParseResult(values=self._initial_values())
        it = iter(argv)
        for arg in it:
            if not arg.startswith("-") or arg == "-":
                if self.stop_at_non_option:
                    result.args.append(arg)
                    break
                result.args.append(arg)
                continue
            if arg[1] != "-":
                self._parse_short(arg, it, result.values)
                continue
            if arg == "--":
                break
            self._parse_long(arg, it, result.values)
        result.args.extend(it)
        return result

    def format_usage(self) -> str:
        """Return the usage and option help text."""
        lines: list[str] = []
        usages = [u for u in self._leading_usages()]
        if usages:
            lines.append(f"Usage: {usages[0]}")
            lines.extend(f"   or: {u}" for u in usages[1:])
        else:
            lines.append("Usage:")
        if self.description:
            lines.append(self.description)
        lines.append("")

        width = max((self._label_width(o) for o in self.options), default=0) + 4
        for option in self.options:
            if option.type is OptionType.GROUP:
                lines.append("")
                lines.append(option.help or "")
                continue
            label = "    " + self._label(option)
            if len(label) <= width:
                pad = width - len(label)
                lines.append(f"{label}{' ' * (pad + 2)}{option.help or ''}")
            else:
                lines.append(label)
                lines.append(f"{' ' * (width + 2)}{option.help or ''}")
        if self.epilog:
            lines.append(self.epilog)
        return "\n".join(lines) + "\n"

    def _leading_usages(self) -> Iterator[str]:
        for usage in self.usages:
            if not usage:
                return
            yield usage

    @staticmethod
    def _label(option: Option) -> str:
        parts = ""
        if option.short_name:
            parts += f"-{option.short_name}"
        if option.short_name and option.long_name:
            parts += ", "
        if option.long_name:
            parts += option.long_name if option.no_prefix else f"--{option.long_name}"
        suffix = {
            OptionType.INTEGER: "=<int>",
            OptionType.FLOAT: "=<flt>",
            OptionType.STRING: "=<str>",
        }.get(option.type, "")
        return parts + suffix

    @classmethod
    def _label_width(cls, option: Option) -> int:
        if option.type is OptionType.GROUP:
            length = 0
        else:
            length = len(cls._label(option))
        return (length + 3) & ~3

    def _initial_values(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for option in self.options:
            if option.dest is None or option.type is OptionType.GROUP:
                continue
            if option.default is not None:
                values.setdefault(option.dest, option.default)
            elif option.type in (OptionType.BOOLEAN, OptionType.BIT, OptionType.INTEGER):
                values.setdefault(option.dest, 0)
            elif option.type is OptionType.FLOAT:
                values.setdefault(option.dest, 0.0)
            else:
                values.setdefault(option.dest, None)
        return values

    def _unknown(self, arg: str) -> None:
        message = f"unknown option `{arg}`"
        if not self.ignore_unknown:
            raise ArgumentError(message, usage=self.format_usage())
        logger.warning(message)

    def _parse_short(self, arg: str, it: Iterator[str], values: dict[str, Any]) -> None:
        rest: Optional[str] = arg[1:]
        while rest:
            option = next(
                (o for o in self.options if o.type is not OptionType.GROUP and o.short_name == rest[0]),
                None,
            )
            if option is None:
                self._unknown(arg)
                return
            rest = self._apply(option, values, rest[1:] or None, it, negate=False, long=False)

    def _parse_long(self, arg: str, it: Iterator[str], values: dict[str, Any]) -> None:
        body = arg[2:]
        for option in self.options:
            if not option.long_name:
                continue
            negate = False
            if body.startswith(option.long_name):
                rest = body[len(option.long_name):]
            else:
                if option.no_negation:
                    continue
                if option.type not in (OptionType.BOOLEAN, OptionType.BIT):
                    continue
                if not body.startswith("no-") or not body[3:].startswith(option.long_name):
                    continue
                rest = body[3 + len(option.long_name):]
                negate = True
            inline = None
            if rest:
                if rest[0] != "=":
                    continue
                inline = rest[1:]
            self._apply(option, values, inline, it, negate=negate, long=True)
            return
        self._unknown(arg)

    def _error(self, option: Option, reason: str, long: bool) -> ArgumentError:
        name = f"--{option.long_name}" if long else f"-{option.short_name}"
        return ArgumentError(f"option `{name}` {reason}")

    def _take(self, option: Option, inline: Optional[str], it: Iterator[str], long: bool) -> str:
        if inline is not None:
            return inline
        value = next(it, None)
        if value is None:
            raise self._error(option, "requires a value", long)
        return value

    def _apply(
        self,
        option: Option,
        values: dict[str, Any],
        inline: Optional[str],
        it: Iterator[str],
        negate: bool,
        long: bool,
    ) -> Optional[str]:
        dest = option.dest
        if dest is not None:
            kind = option.type
            if kind is OptionType.BOOLEAN:
                values[dest] = max(values[dest] + (-1 if negate else 1), 0)
            elif kind is OptionType.BIT:
                if negate:
                    values[dest] &= ~option.data
                else:
                    values[dest] |= option.data
            elif kind is OptionType.STRING:
                values[dest] = self._take(option, inline, it, long)
                inline = None
            elif kind in (OptionType.INTEGER, OptionType.FLOAT):
                text = self._take(option, inline, it, long)
                inline = None
                convert = _parse_int if kind is OptionType.INTEGER else _parse_float
                try:
                    values[dest] = convert(text)
                except (ValueError, OverflowError) as exc:
                    raise self._error(option, str(exc), long) from None
        if option.callback is not None:
            option.callback(self, option)
        return inline