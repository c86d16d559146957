from unittest import mock

import pytest

from queuebench.work import calibrate_work_iters, do_work


def test_zero_iterations_is_identity():
    assert do_work(12345, 0) == 12345


def test_single_step_from_zero_is_increment():
    assert do_work(0, 1) == 9754186451795953191


@pytest.mark.parametrize("a,b", [(1, 1), (3, 7), (10, 0), (25, 25)])
def test_work_composes(a, b):
    assert do_work(do_work(22, a), b) == do_work(22, a + b)


@pytest.mark.parametrize("state", [0, 1, 2**64 - 1, 987654321])
def test_state_stays_within_64_bits(state):
    result = do_work(state, 100)
    assert 0 <= result < 2**64


def test_repeated_runs_agree_with_split_runs():
    results = {do_work(7, 1000) for _ in range(3)}
    assert results == {do_work(do_work(7, 400), 600)}


def test_calibrate_zero_target():
    assert calibrate_work_iters(0) == 0


def test_calibrate_negative_target_rejected():
    with pytest.raises(ValueError):
        calibrate_work_iters(-5)


def test_calibrate_scales_with_measured_time():
    with mock.patch("time.monotonic_ns", side_effect=[0, 2_000_000]):
        assert calibrate_work_iters(1000) == 1000