"""
logfmt encoder: render structured values as `key=value` log lines.
"""
from logfmt_encoder.api import encode_records, encode_to_buffer, encode_to_sink, encode_to_text
from logfmt_encoder.errors import AllocationError, LogfmtError, SinkError, UsageError
from logfmt_encoder.logging_formatter import LogfmtFormatter
from logfmt_encoder.options import EncoderOptions
from logfmt_encoder.record_encoder import RecordEncoder
from logfmt_encoder.value_formatter import Scalar, ScalarKind, format_value, is_bare_safe
from logfmt_encoder.walker import walk

__all__ = [
    "AllocationError",
    "EncoderOptions",
    "LogfmtError",
    "LogfmtFormatter",
    "RecordEncoder",
    "Scalar",
    "ScalarKind",
    "SinkError",
    "UsageError",
    "encode_records",
    "encode_to_buffer",
    "encode_to_sink",
    "encode_to_text",
    "format_value",
    "is_bare_safe",
    "walk",
]
__version__ = "1.0.0"
