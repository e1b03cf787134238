import logging
import sys

from logfmt_encoder.logging_formatter import LogfmtFormatter
from logfmt_encoder.options import EncoderOptions


def make_record(msg="hello %s", args=("world",), level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord("app.core", level, __file__, 10, msg, args, exc_info)
    record.created = 0.0
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_basic_record():
    line = LogfmtFormatter().format(make_record())
    assert line == 'ts=1970-01-01T00:00:00+00:00 level=info logger=app.core msg="hello world"'


def test_extra_fields_are_appended():
    record = make_record(msg="started", args=None, cycle=1, ctx={"user": "bob"}, tags=["a", "b"])
    line = LogfmtFormatter().format(record)
    assert line.endswith("msg=started cycle=1 user=bob tags=a tags=b")


def test_unsupported_extra_is_stringified():
    class Thing:
        def __str__(self):
            return "thing one"

    line = LogfmtFormatter().format(make_record(msg="x", args=None, thing=Thing()))
    assert line.endswith('thing="thing one"')


def test_extras_can_be_disabled():
    line = LogfmtFormatter(include_extras=False).format(make_record(msg="x", args=None, cycle=1))
    assert "cycle" not in line


def test_exception_stays_on_one_line():
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record(msg="failed", args=None, level=logging.ERROR, exc_info=sys.exc_info())
    line = LogfmtFormatter().format(record)
    assert "\n" not in line
    assert "level=error" in line
    assert 'exc="Traceback' in line
    assert "ValueError: boom" in line


def test_custom_options():
    formatter = LogfmtFormatter(EncoderOptions(nested_keys="dotted", escape_keys=True))
    line = formatter.format(make_record(msg="x", args=None, ctx={"user id": 5}))
    assert line.endswith("ctx.user%20id=5")


def test_works_with_a_handler(tmp_path):
    path = tmp_path / "app.log"
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(LogfmtFormatter())
    log = logging.getLogger("logfmt-test-handler")
    log.propagate = False
    log.setLevel(logging.INFO)
    log.addHandler(handler)
    try:
        log.info("first")
        log.warning("second one", extra={"n": 2})
    finally:
        log.removeHandler(handler)
        handler.close()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert "level=info" in lines[0] and lines[0].endswith("msg=first")
    assert lines[1].endswith('msg="second one" n=2')


def test_self_referencing_extra_is_cut_at_the_cycle():
    ctx = {"a": 1}
    ctx["self"] = ctx
    items = [1]
    items.append(items)
    line = LogfmtFormatter().format(make_record(msg="x", args=None, ctx=ctx, items=items))
    assert line.endswith("msg=x a=1 self=<cycle> items=1 items=<cycle>")


def test_shared_extra_values_are_not_cycles():
    shared = {"n": 1}
    line = LogfmtFormatter().format(make_record(msg="x", args=None, ctx={"a": shared, "b": shared}))
    assert line.endswith("msg=x n=1 n=1")


def test_empty_extra_keys_are_replaced():
    line = LogfmtFormatter().format(make_record(msg="x", args=None, ctx={"": 1}))
    assert line.endswith("msg=x _=1")


def test_unencodable_extra_falls_back_to_minimal_record():
    formatter = LogfmtFormatter(EncoderOptions(escape_keys=False))
    line = formatter.format(make_record(msg="kept", args=None, ctx={"user id": 5}))
    assert line == (
        "ts=1970-01-01T00:00:00+00:00 level=info logger=app.core msg=kept "
        "logfmt_error=\"key contains characters that would require quoting (key='user id')\""
    )
