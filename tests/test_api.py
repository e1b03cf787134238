import datetime
import decimal
import enum
import io
from collections import OrderedDict, namedtuple
from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from logfmt_encoder import (
    EncoderOptions,
    RecordEncoder,
    UsageError,
    encode_records,
    encode_to_buffer,
    encode_to_sink,
    encode_to_text,
    walk,
)
from logfmt_encoder.walker import key_text, to_scalar
from logfmt_encoder.value_formatter import ScalarKind


@dataclass
class Event:
    ts: int
    message: str


class Color(enum.Enum):
    RED = 1
    GREEN = 2


@dataclass
class Request:
    method: str
    path: str
    status: int
    duration: float
    color: Color
    body: bytes
    user: Optional[str] = None
    tags: List[str] = field(default_factory=list)


Point = namedtuple("Point", ["x", "y"])


def test_end_to_end_example():
    value = {"ts": 1690232215, "message": "Hello World!"}
    assert encode_to_text(value) == 'ts=1690232215 message="Hello World!"\n'
    assert encode_to_buffer(value) == b'ts=1690232215 message="Hello World!"\n'


def test_dataclass_fields_in_declaration_order():
    assert encode_to_text(Event(ts=1690232215, message="Hello World!")) == \
        'ts=1690232215 message="Hello World!"\n'


def test_mixed_value_kinds():
    req = Request(
        method="GET",
        path="/index.html",
        status=200,
        duration=0.25,
        color=Color.GREEN,
        body=b"\x00\xffA",
        tags=["web", "edge"],
    )
    assert encode_to_text(req) == (
        'method=GET path=/index.html status=200 duration=0.25 color=GREEN '
        'body="00ff41" user tags=web tags=edge\n'
    )


def test_nested_map_is_flattened():
    value = OrderedDict([("level", "info"), ("ctx", {"user": "bob", "id": -3})])
    assert encode_to_text(value) == "level=info user=bob id=-3\n"


def test_dotted_nested_keys():
    value = {"msg": "ok", "ctx": {"user": "bob"}, "nums": [1, 2], "pt": Point(1, 2)}
    options = EncoderOptions(nested_keys="dotted")
    assert encode_to_text(value, options) == "msg=ok ctx.user=bob nums.0=1 nums.1=2 pt.x=1 pt.y=2\n"


def test_sequence_of_maps():
    value = {"items": [{"id": 1}, {"id": 2}]}
    assert encode_to_text(value) == "id=1 id=2\n"


def test_text_like_values():
    value = {
        "when": datetime.datetime(2024, 1, 2, 3, 4, 5),
        "day": datetime.date(2024, 1, 2),
        "amount": decimal.Decimal("12.50"),
    }
    assert encode_to_text(value) == "when=2024-01-02T03:04:05 day=2024-01-02 amount=12.50\n"


def test_generator_and_set_sequences():
    assert encode_to_text({"n": (i for i in range(3))}) == "n=0 n=1 n=2\n"
    assert encode_to_text({"s": {"only"}}) == "s=only\n"


def test_non_string_keys():
    assert encode_to_text({1: "a", False: "b", Color.RED: "c", 1.5: "d"}) == "1=a false=b RED=c 1.5=d\n"


def test_empty_mapping_is_empty_record():
    assert encode_to_text({}) == "\n"
    assert encode_to_text({}, EncoderOptions(terminate_empty_records=False)) == ""


def test_top_level_scalar_is_usage_error():
    with pytest.raises(UsageError):
        encode_to_text(42)


def test_unsupported_values():
    with pytest.raises(UsageError):
        encode_to_text({"obj": object()})
    with pytest.raises(UsageError):
        encode_to_text({(1, 2): "tuple key"})


def test_circular_reference():
    value = {"a": 1}
    value["self"] = value
    with pytest.raises(UsageError):
        encode_to_text(value)


def test_shared_values_are_not_cycles():
    shared = {"x": 1}
    assert encode_to_text({"a": shared, "b": shared}) == "x=1 x=1\n"


def test_bad_key_from_traversal():
    with pytest.raises(UsageError) as exc_info:
        encode_to_text({"bad key": 1})
    assert exc_info.value.key == "bad key"


def test_encode_to_sink_returns_sink():
    sink = io.BytesIO(b"existing\n")
    sink.seek(0, io.SEEK_END)
    assert encode_to_sink({"a": 1}, sink) is sink
    assert sink.getvalue() == b"existing\na=1\n"


def test_encode_records_reuses_one_encoder():
    buf = bytearray()
    count = encode_records([Event(1690232215, "Hello World!")] * 3, buf)
    assert count == 3
    assert buf == b'ts=1690232215 message="Hello World!"\n' * 3


def test_walk_drives_manual_encoder():
    buf = bytearray()
    encoder = RecordEncoder(buf)
    for i in range(2):
        walk({"i": i}, encoder)
        encoder.next()
    assert buf == b"i=0\ni=1\n"


def test_integer_round_trip():
    for n in (0, 2 ** 64 - 1, -(2 ** 63), 2 ** 63 - 1):
        text = encode_to_text({"n": n})
        assert int(text[len("n="):-1]) == n


def test_float_round_trip():
    for f in (0.1, 2.5e-300, 1.7976931348623157e308, -0.0, 123456789.123):
        text = encode_to_text({"f": f})
        assert float(text[len("f="):-1]) == f


def test_to_scalar_classification():
    assert to_scalar(None).kind is ScalarKind.ABSENT
    assert to_scalar(True).kind is ScalarKind.BOOL
    assert to_scalar(-1).kind is ScalarKind.SIGNED
    assert to_scalar(1).kind is ScalarKind.UNSIGNED
    assert to_scalar(1.0).kind is ScalarKind.FLOAT
    assert to_scalar("s").kind is ScalarKind.STR
    assert to_scalar(bytearray(b"x")).kind is ScalarKind.BYTES
    assert to_scalar([1]) is None
    assert to_scalar({"a": 1}) is None


def test_key_text():
    assert key_text("k") == "k"
    assert key_text(False) == "false"
    assert key_text(7) == "7"
    with pytest.raises(UsageError):
        key_text(None)
