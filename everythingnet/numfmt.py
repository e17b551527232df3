"""Low-level number formatting used by the printf family.

These routines turn a single integer or floating point value into text
according to a :class:`FormatSpec`.  They keep the behaviour of a small
embedded printf: conversion is limited to a fixed-size scratch buffer of
32 characters, ``%f`` switches to exponent notation above 1e9, and
precision for fixed notation is capped at nine fractional digits (extra
requested digits are filled with zeros).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace

__all__ = ["FormatSpec", "format_integer", "format_fixed", "format_exponent"]

_BUFFER_SIZE = 32
_DEFAULT_FLOAT_PRECISION = 6
_MAX_FLOAT = 1e9
_POW10 = tuple(float(10**i) for i in range(10))
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_UINT32_MASK = 0xFFFFFFFF
_UINT64_MASK = 0xFFFFFFFFFFFFFFFF


@dataclass(frozen=True)
class FormatSpec:
    """Flags, width and precision of one conversion.

    ``precision`` is ``None`` when no precision was given.
    ``alternate`` is the ``#`` flag; ``adapt_exp`` selects ``%g`` behaviour.
    """

    width: int = 0
    precision: int | None = None
    zero_pad: bool = False
    left: bool = False
    plus: bool = False
    space: bool = False
    alternate: bool = False
    uppercase: bool = False
    adapt_exp: bool = False

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError(f"width must not be negative: {self.width}")
        if self.precision is not None and self.precision < 0:
            raise ValueError(f"precision must not be negative: {self.precision}")

    @property
    def has_precision(self) -> bool:
        return self.precision is not None


def _emit_reversed(buf: list[str], width: int, spec: FormatSpec) -> str:
    """Emit ``buf`` (stored least significant first) with space padding."""
    prefix = ""
    if not spec.left and not spec.zero_pad:
        prefix = " " * max(0, width - len(buf))
    text = prefix + "".join(reversed(buf))
    if spec.left:
        text = text.ljust(width)
    return text


def _sign_char(negative: bool, spec: FormatSpec) -> str | None:
    if negative:
        return "-"
    if spec.plus:
        return "+"
    if spec.space:
        return " "
    return None


def _integer_layout(
    buf: list[str], negative: bool, base: int, prec: int, width: int, spec: FormatSpec
) -> str:
    if not spec.left:
        if width and spec.zero_pad and (negative or spec.plus or spec.space):
            width -= 1
        while len(buf) < prec and len(buf) < _BUFFER_SIZE:
            buf.append("0")
        while spec.zero_pad and len(buf) < width and len(buf) < _BUFFER_SIZE:
            buf.append("0")

    if spec.alternate:
        if not spec.has_precision and buf and (len(buf) == prec or len(buf) == width):
            buf.pop()
            if buf and base == 16:
                buf.pop()
        if len(buf) < _BUFFER_SIZE:
            if base == 16:
                buf.append("X" if spec.uppercase else "x")
            elif base == 2:
                buf.append("b")
        if len(buf) < _BUFFER_SIZE:
            buf.append("0")

    if len(buf) < _BUFFER_SIZE:
        sign = _sign_char(negative, spec)
        if sign:
            buf.append(sign)

    return _emit_reversed(buf, width, spec)


def _integer(
    magnitude: int, negative: bool, base: int, prec: int, width: int, spec: FormatSpec
) -> str:
    if not magnitude:
        spec = replace(spec, alternate=False)

    buf: list[str] = []
    if not spec.has_precision or magnitude:
        while True:
            digit = _DIGITS[magnitude % base]
            buf.append(digit.upper() if spec.uppercase else digit)
            magnitude //= base
            if not magnitude or len(buf) >= _BUFFER_SIZE:
                break

    return _integer_layout(buf, negative, base, prec, width, spec)


def _fixed(value: float, prec: int, width: int, spec: FormatSpec) -> str:
    if value != value:
        return _emit_reversed(list("nan"), width, spec)
    if value == float("-inf"):
        return _emit_reversed(list("fni-"), width, spec)
    if value == float("inf"):
        return _emit_reversed(list("fni+" if spec.plus else "fni"), width, spec)

    if value > _MAX_FLOAT or value < -_MAX_FLOAT:
        return _exponent(value, prec, width, spec)

    negative = value < 0
    if negative:
        value = 0 - value

    if not spec.has_precision:
        prec = _DEFAULT_FLOAT_PRECISION

    buf: list[str] = []
    while len(buf) < _BUFFER_SIZE and prec > 9:
        buf.append("0")
        prec -= 1

    whole = int(value)
    tmp = (value - whole) * _POW10[prec]
    frac = int(tmp)
    diff = tmp - frac

    if diff > 0.5:
        frac += 1
        if frac >= _POW10[prec]:
            frac = 0
            whole += 1
    elif diff < 0.5:
        pass
    elif frac == 0 or frac & 1:
        frac += 1

    if prec == 0:
        diff = value - float(whole)
        if (not (diff < 0.5) or diff > 0.5) and (whole & 1):
            whole += 1
    else:
        count = prec
        while len(buf) < _BUFFER_SIZE:
            count = (count - 1) & _UINT32_MASK
            buf.append(chr(48 + frac % 10))
            frac //= 10
            if not frac:
                break
        while len(buf) < _BUFFER_SIZE and count > 0:
            count -= 1
            buf.append("0")
        if len(buf) < _BUFFER_SIZE:
            buf.append(".")

    while len(buf) < _BUFFER_SIZE:
        buf.append(chr(48 + whole % 10))
        whole //= 10
        if not whole:
            break

    if not spec.left and spec.zero_pad:
        if width and (negative or spec.plus or spec.space):
            width -= 1
        while len(buf) < width and len(buf) < _BUFFER_SIZE:
            buf.append("0")

    if len(buf) < _BUFFER_SIZE:
        sign = _sign_char(negative, spec)
        if sign:
            buf.append(sign)

    return _emit_reversed(buf, width, spec)


def _bits_of(value: float) -> int:
    return struct.unpack("<Q", struct.pack("<d", value))[0]


def _float_of(bits: int) -> float:
    return struct.unpack("<d", struct.pack("<Q", bits & _UINT64_MASK))[0]


def _exponent(value: float, prec: int, width: int, spec: FormatSpec) -> str:
    if value != value or value in (float("inf"), float("-inf")):
        return _fixed(value, prec, width, spec)

    negative = value < 0
    if negative:
        value = -value

    if not spec.has_precision:
        prec = _DEFAULT_FLOAT_PRECISION

    bits = _bits_of(value)
    exp2 = ((bits >> 52) & 0x7FF) - 1023
    mantissa = _float_of((bits & ((1 << 52) - 1)) | (1023 << 52))
    expval = int(
        0.1760912590558 + exp2 * 0.301029995663981 + (mantissa - 1.5) * 0.289529654602168
    )
    exp2 = int(expval * 3.321928094887362 + 0.5)
    z = expval * 2.302585092994046 - exp2 * 0.6931471805599453
    z2 = z * z
    scale = _float_of((exp2 + 1023) << 52)
    scale *= 1 + 2 * z / (2 - z + (z2 / (6 + (z2 / (10 + z2 / 14)))))
    if value < scale:
        expval -= 1
        scale /= 10

    minwidth = 4 if -100 < expval < 100 else 5

    if spec.adapt_exp:
        if 1e-4 <= value < 1e6:
            prec = prec - expval - 1 if prec > expval else 0
            spec = replace(spec, precision=prec)
            minwidth = 0
            expval = 0
        elif prec > 0 and spec.has_precision:
            prec -= 1

    fwidth = width - minwidth if width > minwidth else 0
    if spec.left and minwidth:
        fwidth = 0

    if expval:
        value /= scale

    text = _fixed(-value if negative else value, prec, fwidth, replace(spec, adapt_exp=False))

    if minwidth:
        text += "E" if spec.uppercase else "e"
        text += _integer(
            abs(expval),
            expval < 0,
            10,
            0,
            minwidth - 1,
            FormatSpec(zero_pad=True, plus=True),
        )
        if spec.left:
            text = text.ljust(width)
    return text


def format_integer(value: int, base: int, spec: FormatSpec) -> str:
    """Format an integer in ``base`` (2 to 36).

    Flag adjustments that depend on the conversion letter (dropping ``#``
    for decimal, ``+``/space for unsigned, ``0`` when a precision is
    given) are the caller's job.
    """
    if not 2 <= base <= 36:
        raise ValueError(f"unsupported base: {base}")
    return _integer(abs(value), value < 0, base, spec.precision or 0, spec.width, spec)


def format_fixed(value: float, spec: FormatSpec) -> str:
    """Format a float in fixed notation (``%f``)."""
    return _fixed(float(value), spec.precision or 0, spec.width, spec)


def format_exponent(value: float, spec: FormatSpec) -> str:
    """Format a float in exponent notation (``%e``, or ``%g`` with ``adapt_exp``)."""
    return _exponent(float(value), spec.precision or 0, spec.width, spec)