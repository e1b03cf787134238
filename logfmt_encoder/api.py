"""
Convenience entry points for encoding Python values as logfmt.
"""
from typing import Any, Iterable, Optional

from logfmt_encoder.options import EncoderOptions
from logfmt_encoder.record_encoder import RecordEncoder
from logfmt_encoder.walker import walk


def encode_to_sink(value: Any, sink: Any, options: Optional[EncoderOptions] = None) -> Any:
    """
    Append one terminated logfmt record for a value to a sink.

    Args:
        value: Mapping, dataclass or other composite to encode
        sink: bytearray, binary or text file-like object
        options: Encoder options

    Returns:
        The sink, for chaining

    Raises:
        UsageError: if the value cannot be encoded
        SinkError: if the sink fails
    """
    encoder = RecordEncoder(sink, options)
    walk(value, encoder)
    encoder.next()
    return encoder.release()


def encode_to_buffer(value: Any, options: Optional[EncoderOptions] = None) -> bytes:
    """Encode a value as one logfmt record and return the bytes."""
    buf = bytearray()
    encode_to_sink(value, buf, options)
    return bytes(buf)


def encode_to_text(value: Any, options: Optional[EncoderOptions] = None) -> str:
    """Encode a value as one logfmt record and return the text."""
    # the encoder only ever emits UTF-8
    return encode_to_buffer(value, options).decode("utf-8")


def encode_records(values: Iterable[Any], sink: Any, options: Optional[EncoderOptions] = None) -> int:
    """
    Encode several values through one reused encoder, one record each.

    Returns:
        Number of records written
    """
    encoder = RecordEncoder(sink, options)
    count = 0
    for value in values:
        walk(value, encoder)
        encoder.next()
        count += 1
    return count
