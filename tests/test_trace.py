import pytest

from rsyncsig import trace
from rsyncsig.core import PACKAGE_NAME, LogLevel


@pytest.fixture
def captured():
    lines = []
    trace.trace_to(lambda level, msg: lines.append((level, msg)))
    trace.set_level(LogLevel.INFO)
    yield lines
    trace.trace_to(trace.trace_stderr)
    trace.set_level(LogLevel.INFO)


def test_info_with_function_name(captured):
    trace.log(LogLevel.INFO, "hello", "worker")
    assert captured == [(LogLevel.INFO, f"{PACKAGE_NAME}: (worker) hello\n")]


def test_noname_omits_function(captured):
    trace.log(LogLevel.INFO, "hello", "worker", noname=True)
    trace.log(LogLevel.INFO | trace.LOG_NONAME, "again", "worker")
    assert [msg for _, msg in captured] == [
        f"{PACKAGE_NAME}: hello\n",
        f"{PACKAGE_NAME}: again\n",
    ]


def test_empty_function_omits_parentheses(captured):
    trace.log(LogLevel.NOTICE, "note")
    assert captured[0][1] == f"{PACKAGE_NAME}: note\n"


@pytest.mark.parametrize(
    "level, prefix",
    [
        (LogLevel.EMERG, "EMERGENCY! "),
        (LogLevel.ALERT, "ALERT! "),
        (LogLevel.CRIT, "CRITICAL! "),
        (LogLevel.ERR, "ERROR: "),
        (LogLevel.WARNING, "Warning: "),
    ],
)
def test_severity_prefixes(captured, level, prefix):
    trace.log(level, "boom", noname=True)
    assert captured == [(level, f"{PACKAGE_NAME}: {prefix}boom\n")]


def test_debug_suppressed_until_level_raised(captured):
    trace.log(LogLevel.DEBUG, "hidden")
    assert captured == []
    assert trace.trace_enabled() is False
    trace.set_level(LogLevel.DEBUG)
    assert trace.trace_enabled() is True
    trace.debug("shown", "f")
    assert captured == [(LogLevel.DEBUG, f"{PACKAGE_NAME}: (f) shown\n")]


def test_lower_level_filters_warnings(captured):
    trace.set_level(LogLevel.ERR)
    trace.warn("ignored")
    trace.error("kept")
    assert [msg for _, msg in captured] == [f"{PACKAGE_NAME}: ERROR: kept\n"]


def test_trace_to_none_silences(captured):
    trace.trace_to(None)
    trace.log(LogLevel.EMERG, "nobody hears")
    assert captured == []


def test_long_message_is_truncated(captured):
    trace.log(LogLevel.INFO, "x" * 2000, noname=True)
    msg = captured[0][1]
    assert msg == f"{PACKAGE_NAME}: " + "x" * 999 + "\n"


def test_trace_stderr_writes_message(capsys):
    trace.trace_stderr(LogLevel.INFO, "to stderr\n")
    assert capsys.readouterr().err == "to stderr\n"


def test_default_callback_goes_to_stderr(capsys, captured):
    trace.trace_to(trace.trace_stderr)
    trace.log(LogLevel.WARNING, "careful", "fn")
    assert capsys.readouterr().err == f"{PACKAGE_NAME}: Warning: (fn) careful\n"


def test_supports_trace():
    assert trace.supports_trace() is True