import io

import pytest

from forkbench.debug import (
    AlertFlag,
    AlertLog,
    CilkBug,
    CilkFatalError,
    DebugFlag,
    cilk_assert,
    cilkrts_bug,
    die,
)

UNBUFFERED = 0x80000000


def _log(**kwargs):
    stream = io.StringIO()
    return stream, AlertLog(stream, **kwargs)


def test_unbuffered_alert_has_worker_prefix():
    stream, log = _log()
    log.set_alert_level(UNBUFFERED | AlertFlag.REDUCE)
    log.alert(AlertFlag.REDUCE, 3, "hello")
    assert stream.getvalue() == "[W03]: hello\n"


def test_unbuffered_alert_without_worker():
    stream, log = _log()
    log.set_alert_level(UNBUFFERED | AlertFlag.BOOT)
    log.alert(AlertFlag.BOOT, None, "boot")
    assert stream.getvalue() == "boot\n"


def test_disabled_category_is_silent():
    stream, log = _log()
    log.set_alert_level(UNBUFFERED | AlertFlag.REDUCE)
    log.alert(AlertFlag.FIBER, 0, "quiet")
    assert stream.getvalue() == ""


def test_compiled_level_masks_categories():
    stream, log = _log()
    log.set_alert_level(UNBUFFERED | 0x7FFF)
    assert not log.alert_enabled(AlertFlag.SCHED)
    log.alert(AlertFlag.SCHED, 1, "not compiled in")
    assert stream.getvalue() == ""
    assert log.alert_enabled(AlertFlag.REDUCE)


def test_zero_compiled_level_disables_everything():
    stream, log = _log(compiled_level=0)
    log.set_alert_level(UNBUFFERED | 0x7FFF)
    log.alert(AlertFlag.REDUCE, 1, "nothing")
    assert stream.getvalue() == ""


def test_buffered_alerts_wait_for_flush():
    stream, log = _log()
    log.set_alert_level(AlertFlag.REDUCE)
    log.alert(AlertFlag.REDUCE, 1, "one")
    log.alert(AlertFlag.REDUCE, 2, "two")
    assert stream.getvalue() == ""
    log.flush()
    assert stream.getvalue() == "[W01]: one\n[W02]: two\n"
    assert not log.buffered


def test_level_zero_flushes():
    stream, log = _log()
    log.set_alert_level(AlertFlag.REDUCE)
    log.alert(AlertFlag.REDUCE, 5, "pending")
    log.set_alert_level(0)
    assert stream.getvalue() == "[W05]: pending\n"


def test_buffer_spills_when_full():
    stream, log = _log(log_size=20)
    log.set_alert_level(AlertFlag.REDUCE)
    log.alert(AlertFlag.REDUCE, None, "abcdefghij")
    assert stream.getvalue() == ""
    log.alert(AlertFlag.REDUCE, None, "klmnopqrst")
    assert stream.getvalue() == "abcdefghij\n"
    log.flush()
    assert stream.getvalue() == "abcdefghij\nklmnopqrst\n"


def test_after_flush_alerts_go_straight_out():
    stream, log = _log()
    log.set_alert_level(AlertFlag.REDUCE)
    log.flush()
    log.alert(AlertFlag.REDUCE, None, "direct")
    assert stream.getvalue() == "direct\n"


def test_long_body_is_truncated():
    stream, log = _log()
    log.set_alert_level(UNBUFFERED | AlertFlag.REDUCE)
    log.alert(AlertFlag.REDUCE, None, "x" * 500)
    line = stream.getvalue()
    assert line.endswith("\n")
    assert len(line.rstrip("\n")) == 199


def test_debug_levels():
    _, log = _log()
    assert not log.debug_enabled(DebugFlag.REDUCER)
    log.set_debug_level(DebugFlag.REDUCER | DebugFlag.FIBER)
    assert log.debug_enabled(DebugFlag.REDUCER)
    assert log.debug_enabled(DebugFlag.FIBER)
    assert not log.debug_enabled(DebugFlag.MEMORY)


def test_cilkrts_bug_raises_with_worker():
    with pytest.raises(CilkBug, match=r"\[W02\]: broken"):
        cilkrts_bug(2, "broken")


def test_die_raises_fatal():
    with pytest.raises(CilkFatalError, match="Fatal error: out of memory") as info:
        die("out of memory")
    assert info.value.exit_code == 1


def test_cilk_assert():
    cilk_assert(True, "fine")
    with pytest.raises(CilkBug, match="cilk assertion failed: x > 0"):
        cilk_assert(False, "x > 0", 4)