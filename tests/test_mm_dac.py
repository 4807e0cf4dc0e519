import pytest

from forkbench.mm_dac import (
    is_power_of_2,
    main,
    mm_dac,
    mm_serial,
    rand_matrix,
)


def identity(n):
    return [1 if i == j else 0 for i in range(n) for j in range(n)]


@pytest.mark.parametrize("n", [1, 4, 16, 32])
def test_identity_times_matrix(n):
    b = rand_matrix(n, 5)
    c = [0] * (n * n)
    mm_dac(c, identity(n), b, n)
    assert c == b


@pytest.mark.parametrize("n", [4, 32])
def test_matrix_times_identity(n):
    a = rand_matrix(n, 9)
    c = [0] * (n * n)
    mm_dac(c, a, identity(n), n)
    assert c == a


def test_scalar_matrix_scales():
    n = 32
    b = rand_matrix(n, 3)
    two_i = [2 * v for v in identity(n)]
    c = [0] * (n * n)
    mm_dac(c, two_i, b, n)
    assert c == [2 * v for v in b]


def test_small_known_product():
    c = [0] * 4
    mm_dac(c, [1, 2, 3, 4], [5, 6, 7, 8], 2)
    assert c == [19, 22, 43, 50]


def test_product_accumulates_into_c():
    n = 16
    a = rand_matrix(n, 2)
    b = rand_matrix(n, 4)
    once = [0] * (n * n)
    mm_dac(once, a, b, n)
    twice = list(once)
    mm_dac(twice, a, b, n)
    assert twice == [2 * v for v in once]


def test_dac_matches_serial():
    n = 64
    a = rand_matrix(n, 1)
    b = rand_matrix(n, 2)
    c = [0] * (n * n)
    cs = [0] * (n * n)
    mm_dac(c, a, b, n)
    mm_serial(cs, a, b, n)
    assert c == cs


def test_shape_mismatch_raises():
    with pytest.raises(ValueError):
        mm_dac([0] * 4, [1] * 4, [1] * 3, 2)


def test_rand_matrix_bytes_and_deterministic():
    m = rand_matrix(8, 1)
    assert len(m) == 64
    assert all(0 <= v <= 0xFF for v in m)
    assert m == rand_matrix(8, 1)


def test_rand_matrix_shared_stream_advances():
    from forkbench.mm_dac import _rand_r

    stream = _rand_r(1)
    first = rand_matrix(8, stream)
    second = rand_matrix(8, stream)
    assert first == rand_matrix(8, 1)
    assert second != first


@pytest.mark.parametrize("n, expected", [(0, True), (1, True), (2, True), (1024, True), (3, False), (12, False), (1023, False)])
def test_is_power_of_2(n, expected):
    assert is_power_of_2(n) is expected


def test_main_rejects_non_power_of_two(capsys):
    assert main(["mm_dac", "-n", "12"]) == 1
    assert "Input size must be a power of 2" in capsys.readouterr().err


def test_main_help(capsys):
    assert main(["mm_dac", "-h"]) == 0
    assert "Usage: mm_dac" in capsys.readouterr().err


def test_main_check_passes(capsys):
    assert main(["mm_dac", "-n", "16", "-c"]) == 0
    captured = capsys.readouterr()
    assert "MM_dac test passed." in captured.err
    assert "Running time average" in captured.out