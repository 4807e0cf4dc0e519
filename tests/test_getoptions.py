import pytest

from forkbench.getoptions import OptType, get_options

SORT_SPECS = [("-n", OptType.LONG), ("-c", OptType.BOOL), ("-h", OptType.BOOL)]


def test_cilksort_style_options():
    opts = get_options(["cilksort", "-n", "100", "-c"], SORT_SPECS, {"-n": 10000000})
    assert opts == {"-n": 100, "-c": True, "-h": False}


def test_defaults_kept_when_absent(capsys):
    opts = get_options(["prog"], SORT_SPECS, {"-n": 1024})
    assert opts["-n"] == 1024
    assert opts["-c"] is False
    assert capsys.readouterr().out == ""


def test_bool_default_ignored():
    opts = get_options(["prog"], SORT_SPECS, {"-c": True})
    assert opts["-c"] is False


def test_invalid_option_reported(capsys):
    get_options(["prog", "-x", "-c"], SORT_SPECS, {"-n": 5})
    out = capsys.readouterr().out
    assert "Invalid option: -x" in out
    assert "-c" not in out


def test_trailing_value_option_without_value_is_invalid(capsys):
    opts = get_options(["prog", "-n"], SORT_SPECS, {"-n": 7})
    assert opts["-n"] == 7
    assert "Invalid option: -n" in capsys.readouterr().out


def test_integer_parsing_is_lenient():
    specs = [("-a", OptType.INT), ("-b", OptType.INT)]
    opts = get_options(["prog", "-a", "12abc", "-b", "abc"], specs)
    assert opts == {"-a": 12, "-b": 0}


def test_last_occurrence_wins():
    opts = get_options(["prog", "-n", "3", "-n", "9"], SORT_SPECS)
    assert opts["-n"] == 9


def test_double_and_string():
    specs = [("-d", OptType.DOUBLE), ("-s", OptType.STRING)]
    opts = get_options(["prog", "-d", "2.5x", "-s", "hello"], specs)
    assert opts["-d"] == pytest.approx(2.5)
    assert opts["-s"] == "hello"


@pytest.mark.parametrize(
    "args, expected",
    [
        ([], 0),
        (["-b"], 2),
        (["-b", "short"], 1),
        (["-b", "medium"], 2),
        (["-b", "long"], 3),
    ],
)
def test_benchmark_levels(args, expected):
    opts = get_options(["prog", *args], [("-b", OptType.BENCHMARK)])
    assert opts["-b"] == expected


def test_benchmark_consumes_following_word(capsys):
    opts = get_options(["prog", "-b", "other"], [("-b", OptType.BENCHMARK)])
    assert opts["-b"] == 2
    assert capsys.readouterr().out == ""


def test_argv_not_modified():
    argv = ["prog", "-n", "4", "-c"]
    get_options(argv, SORT_SPECS)
    assert argv == ["prog", "-n", "4", "-c"]


def test_consumed_value_not_matched_as_flag():
    specs = [("-n", OptType.LONG), ("-c", OptType.BOOL)]
    opts = get_options(["prog", "-n", "-c"], specs)
    assert opts["-c"] is False
    assert opts["-n"] == 0