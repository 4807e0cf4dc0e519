import pytest

from forkbench.ktiming import (
    diff_nsec,
    diff_sec,
    format_runtime,
    getmark,
    print_runtime,
    print_runtime_summary,
)


def test_getmark_is_monotonic():
    first = getmark()
    second = getmark()
    assert second >= first
    assert diff_nsec(first, second) == second - first


def test_diff_nsec():
    assert diff_nsec(100, 250) == 150


def test_diff_nsec_wraps_unsigned():
    assert diff_nsec(1, 0) == (1 << 64) - 1


def test_diff_sec_matches_nsec():
    assert diff_sec(0, 3_000_000_000) == pytest.approx(3.0)
    assert diff_sec(10, 510) == pytest.approx(diff_nsec(10, 510) * 1e-9)


def test_single_run_report():
    text = format_runtime([2_000_000_000])
    assert text == "Running time 1: 2s\nRunning time average: 2 s\n"


def test_equal_runs_have_no_deviation_line():
    text = format_runtime([1_000_000_000] * 3)
    assert "Std. dev" not in text
    assert text.count("Running time ") == 4


def test_varied_runs_report_deviation():
    text = format_runtime([1_000_000_000, 3_000_000_000])
    lines = text.splitlines()
    assert lines[0].startswith("Running time 1: ")
    assert lines[1].startswith("Running time 2: ")
    assert lines[2].startswith("Running time average: ")
    assert lines[3].startswith("Std. dev: ")
    assert lines[3].endswith("%)")


def test_summary_omits_individual_runs():
    elapsed = [5, 7, 9]
    full = format_runtime(elapsed)
    summary = format_runtime(elapsed, summary=True)
    assert "Running time 1:" not in summary
    assert full.endswith(summary)


def test_empty_runs_rejected():
    with pytest.raises(ValueError):
        format_runtime([])


def test_print_functions_match_format(capsys):
    elapsed = [1_500_000, 2_500_000]
    print_runtime(elapsed)
    assert capsys.readouterr().out == format_runtime(elapsed)
    print_runtime_summary(elapsed)
    assert capsys.readouterr().out == format_runtime(elapsed, summary=True)