"""
logging.Formatter that renders records as logfmt lines.

Example:
    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter())
    logging.getLogger("app").addHandler(handler)
    logging.getLogger("app").info("started", extra={"cycle": 1})
    # ts=2024-01-01T00:00:00.000000+00:00 level=info logger=app msg=started cycle=1
"""
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from logfmt_encoder.errors import LogfmtError
from logfmt_encoder.options import EncoderOptions
from logfmt_encoder.record_encoder import RecordEncoder
from logfmt_encoder.walker import to_scalar, walk

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

_DEFAULT_OPTIONS = EncoderOptions(escape_control=True, escape_keys=True)

# Written in place of a container that contains itself
CYCLE_MARKER = "<cycle>"


def _coerce_key(key: Any) -> str:
    # empty keys cannot be written, not even percent-encoded
    return str(key) or "_"


def _coerce(value: Any, active: Optional[Set[int]] = None) -> Any:
    if to_scalar(value) is not None:
        return value
    if not isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return str(value)

    active = set() if active is None else active
    ident = id(value)
    if ident in active:
        return CYCLE_MARKER
    active.add(ident)
    try:
        if isinstance(value, Mapping):
            return {_coerce_key(k): _coerce(v, active) for k, v in value.items()}
        return [_coerce(v, active) for v in value]
    finally:
        active.discard(ident)


def _safe_text(text: str) -> str:
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


class LogfmtFormatter(logging.Formatter):
    """Formats each LogRecord as a single logfmt record."""

    def __init__(self, options: Optional[EncoderOptions] = None, include_extras: bool = True):
        """
        Initialize the formatter.

        Args:
            options: Encoder options; control characters and odd keys are escaped by default
            include_extras: Append fields passed through `extra=`
        """
        super().__init__()
        self.options = options or _DEFAULT_OPTIONS
        self.include_extras = include_extras

    def record_fields(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Collect the fields written for a record, in output order."""
        fields: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if self.include_extras:
            for key, value in record.__dict__.items():
                if key not in _RESERVED and key not in fields and not key.startswith("_"):
                    fields[_coerce_key(key)] = _coerce(value)
        if record.exc_info:
            fields["exc"] = self.formatException(record.exc_info)
        if record.stack_info:
            fields["stack"] = self.formatStack(record.stack_info)
        return fields

    def fallback_fields(self, record: logging.LogRecord, error: LogfmtError) -> Dict[str, Any]:
        """Minimal fields written when the full record cannot be encoded."""
        return {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": _safe_text(record.name),
            "msg": _safe_text(record.getMessage()),
            "logfmt_error": _safe_text(str(error)),
        }

    def format(self, record: logging.LogRecord) -> str:
        try:
            return self._encode(self.record_fields(record))
        except LogfmtError as e:
            return self._encode(self.fallback_fields(record, e))

    def _encode(self, fields: Dict[str, Any]) -> str:
        buf = bytearray()
        encoder = RecordEncoder(buf, self.options)
        walk(fields, encoder)
        # the handler writes the line terminator
        return buf.decode("utf-8")
