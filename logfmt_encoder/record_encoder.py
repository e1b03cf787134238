"""
Stateful logfmt record encoder.

A RecordEncoder wraps a caller-owned sink and turns a stream of structural
events (key, value, begin/end composite, element, record boundary) into
`key=value` fields separated by single spaces, one record per line.

The encoder is not thread-safe: use one instance per thread, or guard it
with an external lock.
"""
import io
import logging
from typing import Any, Callable, List, Optional

from logfmt_encoder.errors import SinkError, UsageError
from logfmt_encoder.options import DEFAULT_OPTIONS, EncoderOptions
from logfmt_encoder.value_formatter import Scalar, ScalarKind, format_value, is_bare_safe

logger = logging.getLogger(__name__)

MAP = "map"
SEQUENCE = "sequence"


class _Frame:
    """An open composite."""

    __slots__ = ("kind", "name", "index")

    def __init__(self, kind: str, name: Optional[str]):
        self.kind = kind
        self.name = name
        self.index = 0


def percent_encode_key(name: str) -> str:
    """Percent-encode every character of a key that would need quoting."""
    parts = []
    for ch in name:
        if is_bare_safe(ch):
            parts.append(ch)
        else:
            parts.extend(f"%{b:02X}" for b in ch.encode("utf-8"))
    return "".join(parts)


def _sink_writer(sink: Any) -> Callable[[bytes], Any]:
    if isinstance(sink, bytearray):
        return sink.extend
    if isinstance(sink, io.TextIOBase):
        return lambda data: sink.write(data.decode("utf-8"))
    write = getattr(sink, "write", None)
    if not callable(write):
        raise TypeError(f"sink must be a bytearray or have a write() method, got {type(sink).__name__}")
    return write


class RecordEncoder:
    """Writes logfmt records into a sink."""

    def __init__(self, sink: Any, options: Optional[EncoderOptions] = None):
        """
        Initialize the encoder.

        Args:
            sink: bytearray, binary file-like or text file-like object; stays owned by the caller
            options: Encoder options, defaults to EncoderOptions()
        """
        self._sink = sink
        self._writer = _sink_writer(sink)
        self.options = options or DEFAULT_OPTIONS
        self._scratch = bytearray()
        self._frames: List[_Frame] = []
        self._pending_key: Optional[str] = None
        self._fields_written = False
        self._released = False

    @property
    def sink(self) -> Any:
        return self._sink

    @property
    def fields_written(self) -> bool:
        """True once a field has been written in the current record."""
        return self._fields_written

    @property
    def depth(self) -> int:
        """Number of composites currently open."""
        return len(self._frames)

    def write_key(self, name: str):
        """
        Set the key for the next value or composite.

        Args:
            name: Field name; must be non-empty and need no quoting

        Raises:
            UsageError: if a key is already pending, the key is invalid,
                or the encoder is directly inside a sequence
        """
        self._check_open()
        if not isinstance(name, str):
            raise UsageError(f"key must be text, got {type(name).__name__}", value=name)
        if self._pending_key is not None:
            raise UsageError("key written twice without a value", key=self._pending_key)
        if self._frames and self._frames[-1].kind == SEQUENCE:
            raise UsageError("keys cannot be written directly inside a sequence", key=name)
        if not name:
            raise UsageError("key must not be empty", key=name)
        if not is_bare_safe(name):
            if not self.options.escape_keys:
                raise UsageError("key contains characters that would require quoting", key=name)
            name = percent_encode_key(name)
        self._pending_key = name

    def write_value(self, scalar: Scalar):
        """
        Write the value for the pending key as one field.

        Raises:
            UsageError: if no key is pending
            SinkError: if the sink fails
        """
        self._check_open()
        if not isinstance(scalar, Scalar):
            raise UsageError(f"value must be a Scalar, got {type(scalar).__name__}", value=scalar)
        if self._pending_key is None:
            raise UsageError("value written before key", value=scalar.value)
        key = self._field_key(self._pending_key)
        self._pending_key = None
        self._emit_field(key, scalar)

    def write_field(self, name: str, scalar: Scalar):
        """Write a key and its value."""
        self.write_key(name)
        self.write_value(scalar)

    def write_element(self, scalar: Scalar):
        """
        Write one element of the innermost open sequence as a field.

        Raises:
            UsageError: if the innermost composite is not a sequence, or the
                element has no name to be written under
        """
        self._check_open()
        if not isinstance(scalar, Scalar):
            raise UsageError(f"value must be a Scalar, got {type(scalar).__name__}", value=scalar)
        if not self._frames or self._frames[-1].kind != SEQUENCE:
            raise UsageError("element written outside a sequence", value=scalar.value)
        frame = self._frames[-1]
        if self.options.nested_keys == "dotted":
            key = self._field_key(str(frame.index))
        elif frame.name is None:
            raise UsageError("sequence element has no enclosing key", value=scalar.value)
        else:
            key = frame.name
        frame.index += 1
        self._emit_field(key, scalar)

    def begin_map(self):
        """Open a map or struct; its entries become ordinary fields."""
        self._enter(MAP)

    def end_map(self):
        self._leave(MAP)

    def begin_sequence(self):
        """Open a sequence; its elements become ordinary fields."""
        self._enter(SEQUENCE)

    def end_sequence(self):
        self._leave(SEQUENCE)

    def next(self):
        """
        Close the current record and prepare for the next one.

        Writes the newline terminator when the record has fields, or always when
        `terminate_empty_records` is set.

        Raises:
            UsageError: if a composite is still open or a key is pending
            SinkError: if the sink fails
        """
        self._check_open()
        if self._frames:
            raise UsageError(f"record boundary inside {len(self._frames)} open composite(s)")
        if self._pending_key is not None:
            raise UsageError("record boundary with a key but no value", key=self._pending_key)
        if self._fields_written or self.options.terminate_empty_records:
            self._write(b"\n")
        self._clear()

    def reset(self):
        """
        Discard the state of the current record without writing anything.

        Bytes already written to the sink are not retracted.
        """
        if self._frames or self._pending_key is not None or self._fields_written:
            logger.debug(f"Discarding partial record (depth={len(self._frames)})")
        self._clear()

    def release(self) -> Any:
        """Hand the sink back to the caller; the encoder cannot be used afterwards."""
        self._check_open()
        self._released = True
        self._clear()
        return self._sink

    def _clear(self):
        self._frames.clear()
        self._pending_key = None
        self._fields_written = False

    def _check_open(self):
        if self._released:
            raise UsageError("encoder has released its sink")

    def _field_key(self, name: str) -> str:
        if self.options.nested_keys != "dotted":
            return name
        path = [frame.name for frame in self._frames if frame.name is not None]
        path.append(name)
        return ".".join(path)

    def _enter(self, kind: str):
        self._check_open()
        parent = self._frames[-1] if self._frames else None
        if parent is not None and parent.kind == SEQUENCE:
            if self.options.nested_keys == "dotted":
                name = str(parent.index)
            else:
                name = parent.name
            parent.index += 1
        elif parent is not None and self._pending_key is None:
            raise UsageError(f"{kind} inside a map needs a key")
        else:
            name = self._pending_key
        self._pending_key = None
        self._frames.append(_Frame(kind, name))

    def _leave(self, kind: str):
        self._check_open()
        if not self._frames:
            raise UsageError(f"end of {kind} without a matching begin")
        frame = self._frames[-1]
        if frame.kind != kind:
            raise UsageError(f"end of {kind} while a {frame.kind} is open", key=frame.name)
        if self._pending_key is not None:
            raise UsageError(f"end of {kind} with a key but no value", key=self._pending_key)
        self._frames.pop()

    def _emit_field(self, key: str, scalar: Scalar):
        scratch = self._scratch
        del scratch[:]
        if self._fields_written:
            scratch += b" "
        try:
            scratch += key.encode("utf-8")
            if scalar.kind is not ScalarKind.ABSENT:
                scratch += b"="
                format_value(scalar, scratch, escape_control=self.options.escape_control)
        except UnicodeEncodeError as e:
            raise UsageError(f"field is not encodable as UTF-8: {e}", key=key) from e
        self._write(bytes(scratch))
        self._fields_written = True

    def _write(self, data: bytes):
        try:
            self._writer(data)
        except (OSError, ValueError, TypeError) as e:
            raise SinkError("failed to write to sink", e) from e
