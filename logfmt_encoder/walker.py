"""
Walk Python values and feed them to a RecordEncoder.

Mappings, dataclasses and namedtuples become maps, lists/tuples/sets and
generators become sequences, everything else must be a scalar. Key order is
exactly the iteration order of the value.
"""
import dataclasses
import datetime
import decimal
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from enum import Enum
from pathlib import PurePath
from typing import Any, Iterable, Optional, Set, Tuple

from logfmt_encoder.errors import UsageError
from logfmt_encoder.record_encoder import RecordEncoder
from logfmt_encoder.value_formatter import Scalar, format_float

_TEXT_LIKE = (decimal.Decimal, uuid.UUID, PurePath)
_SEQUENCE_TYPES = (list, tuple, set, frozenset, Iterator)


def to_scalar(value: Any) -> Optional[Scalar]:
    """
    Classify a Python value as a Scalar.

    Returns:
        The Scalar, or None when the value is a composite or unsupported
    """
    if isinstance(value, Scalar):
        return value
    if value is None:
        return Scalar.absent()
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return Scalar.boolean(value)
    if isinstance(value, Enum):
        return Scalar.text(str(value.name))
    if isinstance(value, int):
        return Scalar.signed(value) if value < 0 else Scalar.unsigned(value)
    if isinstance(value, float):
        return Scalar.floating(value)
    if isinstance(value, str):
        return Scalar.text(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Scalar.binary(bytes(value))
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return Scalar.text(value.isoformat())
    if isinstance(value, _TEXT_LIKE):
        return Scalar.text(str(value))
    return None


def key_text(key: Any) -> str:
    """Render a mapping key as text."""
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, Enum):
        return str(key.name)
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float):
        return format_float(key)
    raise UsageError(f"unsupported key type {type(key).__name__}", value=key)


def _map_items(value: Any) -> Optional[Iterable[Tuple[Any, Any]]]:
    if isinstance(value, Mapping):
        return value.items()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return ((f.name, getattr(value, f.name)) for f in dataclasses.fields(value))
    if isinstance(value, tuple) and hasattr(value, "_asdict"):
        return value._asdict().items()
    return None


class ValueWalker:
    """Drives a RecordEncoder over one Python value."""

    def __init__(self, encoder: RecordEncoder):
        self.encoder = encoder
        self._active: Set[int] = set()

    def walk(self, value: Any):
        """
        Emit the structural events for a value.

        Raises:
            UsageError: for unsupported types, circular references, or a
                scalar with no key to be written under
        """
        scalar = to_scalar(value)
        if scalar is not None:
            self.encoder.write_value(scalar)
            return

        items = _map_items(value)
        if items is not None:
            with self._visiting(value):
                self.encoder.begin_map()
                for key, item in items:
                    self._walk_entry(key_text(key), item)
                self.encoder.end_map()
            return

        if isinstance(value, _SEQUENCE_TYPES):
            with self._visiting(value):
                self.encoder.begin_sequence()
                for item in value:
                    self._walk_element(item)
                self.encoder.end_sequence()
            return

        raise UsageError(f"unsupported value type {type(value).__name__}", value=value)

    def _walk_entry(self, key: str, item: Any):
        self.encoder.write_key(key)
        self.walk(item)

    def _walk_element(self, item: Any):
        scalar = to_scalar(item)
        if scalar is not None:
            self.encoder.write_element(scalar)
        else:
            self.walk(item)

    @contextmanager
    def _visiting(self, value: Any):
        ident = id(value)
        if ident in self._active:
            raise UsageError("circular reference detected")
        self._active.add(ident)
        try:
            yield
        finally:
            self._active.discard(ident)


def walk(value: Any, encoder: RecordEncoder):
    """Emit the structural events for a value into an encoder."""
    ValueWalker(encoder).walk(value)
