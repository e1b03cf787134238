"""
Scalar value formatting for logfmt.

Every scalar handed to the encoder is rendered here into a caller-owned
bytearray. Rendering is buffer-local so the quoting decision for text can be
made on the whole value before anything reaches the sink.

Rules:
- Integers are decimal, floats use the shortest round-trip form
- Booleans are `true` / `false`, absent values render as nothing
- Text is emitted bare when it is bare-safe, otherwise quoted with
  `"` and `\\` escaped
- Byte sequences are always a quoted lowercase hex string
"""
import math
from enum import Enum
from typing import Any, NamedTuple

from logfmt_encoder.errors import AllocationError

QUOTE = b'"'

_NEEDS_QUOTING = frozenset(' "=')

_SHORT_ESCAPES = {
    "\0": "\\0",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


class ScalarKind(Enum):
    """Closed set of scalar kinds the encoder knows how to render."""

    SIGNED = "signed"
    UNSIGNED = "unsigned"
    FLOAT = "float"
    BOOL = "bool"
    STR = "str"
    BYTES = "bytes"
    ABSENT = "absent"


class Scalar(NamedTuple):
    """A single tagged scalar value."""

    kind: ScalarKind
    value: Any = None

    @classmethod
    def signed(cls, value: int) -> "Scalar":
        return cls(ScalarKind.SIGNED, int(value))

    @classmethod
    def unsigned(cls, value: int) -> "Scalar":
        if value < 0:
            raise ValueError(f"unsigned scalar cannot be negative: {value}")
        return cls(ScalarKind.UNSIGNED, int(value))

    @classmethod
    def floating(cls, value: float) -> "Scalar":
        return cls(ScalarKind.FLOAT, float(value))

    @classmethod
    def boolean(cls, value: bool) -> "Scalar":
        return cls(ScalarKind.BOOL, bool(value))

    @classmethod
    def text(cls, value: str) -> "Scalar":
        return cls(ScalarKind.STR, value)

    @classmethod
    def binary(cls, value: bytes) -> "Scalar":
        return cls(ScalarKind.BYTES, bytes(value))

    @classmethod
    def absent(cls) -> "Scalar":
        return cls(ScalarKind.ABSENT, None)


def is_bare_safe(text: str) -> bool:
    """
    Check whether text can be written without quotes.

    Bare-safe text is non-empty and contains no space, `"`, `=`
    or control character below 0x20.
    """
    if not text:
        return False
    for ch in text:
        if ch in _NEEDS_QUOTING or ch < " ":
            return False
    return True


def format_float(value: float) -> str:
    """Render a float in its shortest round-trip form."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)


def _control_picture(ch: str) -> str:
    # U+2400 block: one picture per C0 control, U+2421 for DEL
    if ch == "\x7f":
        return "␡"
    return chr(0x2400 + ord(ch))


def quote_text(text: str, escape_control: bool = False) -> str:
    """
    Wrap text in double quotes, escaping `"` and `\\`.

    Args:
        text: Text to quote
        escape_control: Also escape control characters so the value stays on one line

    Returns:
        The quoted text
    """
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    if escape_control:
        parts = []
        for ch in escaped:
            if ch in _SHORT_ESCAPES:
                parts.append(_SHORT_ESCAPES[ch])
            elif ch < " " or ch == "\x7f":
                parts.append(_control_picture(ch))
            else:
                parts.append(ch)
        escaped = "".join(parts)
    return f'"{escaped}"'


def render_text(text: str, escape_control: bool = False) -> str:
    """Render a text value, bare when possible."""
    if is_bare_safe(text):
        return text
    return quote_text(text, escape_control=escape_control)


def format_value(scalar: Scalar, buf: bytearray, escape_control: bool = False) -> bytearray:
    """
    Append the logfmt form of a scalar to a buffer.

    Args:
        scalar: Value to render
        buf: Destination buffer, grown in place
        escape_control: Escape control characters inside quoted text

    Returns:
        The same buffer, for chaining
    """
    kind = scalar.kind
    try:
        if kind is ScalarKind.SIGNED or kind is ScalarKind.UNSIGNED:
            buf += str(scalar.value).encode("ascii")
        elif kind is ScalarKind.FLOAT:
            buf += format_float(scalar.value).encode("ascii")
        elif kind is ScalarKind.BOOL:
            buf += b"true" if scalar.value else b"false"
        elif kind is ScalarKind.STR:
            buf += render_text(scalar.value, escape_control=escape_control).encode("utf-8")
        elif kind is ScalarKind.BYTES:
            buf += QUOTE
            buf += scalar.value.hex().encode("ascii")
            buf += QUOTE
        elif kind is ScalarKind.ABSENT:
            pass
        else:
            raise ValueError(f"Unknown scalar kind: {kind!r}")
    except MemoryError as e:
        raise AllocationError(f"could not grow buffer for {kind.value} value") from e
    return buf
