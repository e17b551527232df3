"""A small printf family built on :mod:`everythingnet.numfmt`.

The conversions follow the embedded printf the platform layer relies on:
``d i u x X o b`` for integers, ``f F e E g G`` for floats, ``c``, ``s``,
``p`` and ``%%``.  Flags ``0 - + space #``, a width and a precision, each
possibly ``*``, and the length modifiers ``hh h l ll t j z`` are understood.
Integers are wrapped to the size the length modifier names, assuming an
LP64 machine: ``int`` is 32 bits, ``long``, ``long long`` and pointers are
64 bits.  An unknown conversion letter is copied to the output as is.
"""

from __future__ import annotations

import operator
import sys
from typing import Any, Callable, Iterator

from everythingnet.numfmt import (
    FormatSpec,
    format_exponent,
    format_fixed,
    format_integer,
)

__all__ = ["sprintf", "snprintf", "fctprintf", "printf"]

_FLAG_CHARS = "0-+ #"
_INT_CONVERSIONS = "diuxXob"
_POINTER_WIDTH = 16

_BITS_CHAR = 8
_BITS_SHORT = 16
_BITS_INT = 32
_BITS_LONG = 64


def _take(args: Iterator[Any]) -> Any:
    try:
        return next(args)
    except StopIteration:
        raise TypeError("not enough arguments for format string") from None


def _as_int(value: Any) -> int:
    try:
        return operator.index(value)
    except TypeError:
        raise TypeError(f"an integer is required, not {type(value).__name__}") from None


def _wrap_unsigned(value: int, bits: int) -> int:
    return value & ((1 << bits) - 1)


def _wrap_signed(value: int, bits: int) -> int:
    value = _wrap_unsigned(value, bits)
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _as_char(value: Any) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise TypeError("%c requires a single character")
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 1:
            raise TypeError("%c requires a single byte")
        return chr(value[0])
    return chr(_as_int(value) & 0xFF)


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        text = value
    elif isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("latin-1")
    else:
        raise TypeError(f"%s requires a string, not {type(value).__name__}")
    nul = text.find("\0")
    return text if nul < 0 else text[:nul]


class _Cursor:
    """Read position inside a format string."""

    def __init__(self, fmt: str) -> None:
        self.fmt = fmt
        self.pos = 0

    def peek(self) -> str:
        return self.fmt[self.pos] if self.pos < len(self.fmt) else ""

    def advance(self) -> str:
        ch = self.peek()
        self.pos += 1
        return ch

    def number(self) -> int:
        start = self.pos
        while self.peek().isdigit() and self.peek() in "0123456789":
            self.pos += 1
        return int(self.fmt[start:self.pos])


def _integer_bits(length: str, signed: bool) -> int:
    if length in ("ll", "l"):
        return _BITS_LONG
    if length == "hh":
        return _BITS_CHAR
    if length == "h":
        return _BITS_SHORT
    return _BITS_INT


def _convert(cur: _Cursor, args: Iterator[Any]) -> str:
    zero_pad = left = plus = space = alternate = False
    while cur.peek() and cur.peek() in _FLAG_CHARS:
        flag = cur.advance()
        if flag == "0":
            zero_pad = True
        elif flag == "-":
            left = True
        elif flag == "+":
            plus = True
        elif flag == " ":
            space = True
        else:
            alternate = True

    width = 0
    if cur.peek() in "0123456789" and cur.peek():
        width = cur.number()
    elif cur.peek() == "*":
        cur.advance()
        w = _as_int(_take(args))
        if w < 0:
            left = True
            width = -w
        else:
            width = w

    precision: int | None = None
    if cur.peek() == ".":
        cur.advance()
        precision = 0
        if cur.peek() and cur.peek() in "0123456789":
            precision = cur.number()
        elif cur.peek() == "*":
            cur.advance()
            precision = max(_as_int(_take(args)), 0)

    length = ""
    nxt = cur.peek()
    if nxt in ("l", "h") and nxt:
        cur.advance()
        length = nxt
        if cur.peek() == nxt:
            cur.advance()
            length += nxt
    elif nxt in ("t", "j", "z") and nxt:
        cur.advance()
        length = "l"

    conv = cur.advance()
    if not conv:
        return ""

    if conv in _INT_CONVERSIONS:
        if conv in "xX":
            base = 16
        elif conv == "o":
            base = 8
        elif conv == "b":
            base = 2
        else:
            base = 10
            alternate = False
        if conv not in "di":
            plus = space = False
        if precision is not None:
            zero_pad = False
        spec = FormatSpec(
            width=width,
            precision=precision,
            zero_pad=zero_pad,
            left=left,
            plus=plus,
            space=space,
            alternate=alternate,
            uppercase=conv == "X",
        )
        raw = _as_int(_take(args))
        bits = _integer_bits(length, conv in "di")
        value = _wrap_signed(raw, bits) if conv in "di" else _wrap_unsigned(raw, bits)
        return format_integer(value, base, spec)

    if conv in "fFeEgG":
        spec = FormatSpec(
            width=width,
            precision=precision,
            zero_pad=zero_pad,
            left=left,
            plus=plus,
            space=space,
            alternate=alternate,
            uppercase=conv in "FEG",
            adapt_exp=conv in "gG",
        )
        arg = _take(args)
        try:
            value = float(arg)
        except (TypeError, ValueError):
            raise TypeError(f"a real number is required, not {type(arg).__name__}") from None
        if conv in "fF":
            return format_fixed(value, spec)
        return format_exponent(value, spec)

    if conv == "c":
        ch = _as_char(_take(args))
        pad = " " * max(0, width - 1)
        return ch + pad if left else pad + ch

    if conv == "s":
        text = _as_text(_take(args))
        if precision is not None:
            text = text[:precision]
        pad = " " * max(0, width - len(text))
        return text + pad if left else pad + text

    if conv == "p":
        arg = _take(args)
        address = arg if isinstance(arg, int) else id(arg)
        spec = FormatSpec(
            width=_POINTER_WIDTH,
            precision=precision,
            zero_pad=True,
            left=left,
            plus=False,
            space=False,
            alternate=alternate,
            uppercase=True,
        )
        return format_integer(_wrap_unsigned(address, _BITS_LONG), 16, spec)

    return conv


def _render(fmt: str, args: tuple[Any, ...]) -> str:
    cur = _Cursor(fmt)
    arg_iter = iter(args)
    pieces: list[str] = []
    while cur.pos < len(fmt):
        ch = cur.advance()
        if ch != "%":
            pieces.append(ch)
            continue
        pieces.append(_convert(cur, arg_iter))
    return "".join(pieces)


def sprintf(fmt: str, *args: Any) -> str:
    """Return ``fmt`` formatted with ``args``."""
    return _render(fmt, args)


def snprintf(count: int, fmt: str, *args: Any) -> tuple[str, int]:
    """Format into a buffer of ``count`` characters including the terminator.

    Returns the text that fits (at most ``count - 1`` characters) and the
    length the complete output would have had.
    """
    if count < 0:
        raise ValueError(f"count must not be negative: {count}")
    text = _render(fmt, args)
    return text[: max(count - 1, 0)], len(text)


def fctprintf(out: Callable[[str], Any], fmt: str, *args: Any) -> int:
    """Send each output character to ``out``; return the output length.

    NUL characters are counted but not passed to ``out``.
    """
    text = _render(fmt, args)
    for ch in text:
        if ch != "\0":
            out(ch)
    return len(text)


def printf(fmt: str, *args: Any) -> int:
    """Write the formatted text to standard output; return its length."""
    return fctprintf(sys.stdout.write, fmt, *args)