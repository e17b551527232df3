import pytest

from everythingnet.state import AppState, ExitCallbacks


def test_callbacks_run_in_order_with_status():
    calls = []
    state = AppState(
        ExitCallbacks(
            snd=lambda: calls.append("snd"),
            gfx=lambda: calls.append("gfx"),
            plat=lambda: calls.append("plat"),
            exit=lambda status: calls.append(("exit", status)),
        )
    )
    with pytest.raises(RuntimeError):
        state.cleanup_and_exit(3)
    assert calls == ["snd", "gfx", "plat", ("exit", 3)]


def test_missing_exit_callback_raises():
    calls = []
    state = AppState()
    state.exit_callbacks.plat = lambda: calls.append("plat")
    with pytest.raises(RuntimeError):
        state.cleanup_and_exit(0)
    assert calls == ["plat"]


def test_returning_exit_callback_raises():
    seen = []
    state = AppState(ExitCallbacks(exit=seen.append))
    with pytest.raises(RuntimeError):
        state.cleanup_and_exit(7)
    assert seen == [7]


def test_reset_clears_callbacks():
    seen = []
    state = AppState(ExitCallbacks(snd=lambda: seen.append("snd"), exit=seen.append))
    state.reset()
    assert state.exit_callbacks == ExitCallbacks()
    with pytest.raises(RuntimeError):
        state.cleanup_and_exit(1)
    assert seen == []