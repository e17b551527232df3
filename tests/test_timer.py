import pytest

from everythingnet.timer import LoopTimer


def _fake_clock(values):
    it = iter(values)
    return lambda: next(it)


def test_elapsed_from_fake_clock():
    timer = LoopTimer(clock=_fake_clock([1_000_000, 3_500_000]))
    timer.start()
    assert timer.elapsed_usec() == 2500


def test_elapsed_truncates_partial_microseconds():
    timer = LoopTimer(clock=_fake_clock([0, 1999]))
    timer.start()
    assert timer.elapsed_usec() == 1


def test_elapsed_without_start_raises():
    with pytest.raises(RuntimeError):
        LoopTimer().elapsed_usec()


def test_real_clock_is_monotonic():
    timer = LoopTimer()
    timer.start()
    first = timer.elapsed_usec()
    second = timer.elapsed_usec()
    assert 0 <= first <= second


def test_sleep_converts_to_seconds():
    slept = []
    timer = LoopTimer(sleeper=slept.append)
    timer.sleep_usec(250_000)
    assert slept == [0.25]


def test_negative_sleep_rejected():
    with pytest.raises(ValueError):
        LoopTimer(sleeper=lambda s: None).sleep_usec(-1)