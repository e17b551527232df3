"""Application-wide state: the callbacks that run when the program exits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, NoReturn, Optional

__all__ = ["ExitCallbacks", "AppState"]


@dataclass
class ExitCallbacks:
    """Clean-up hooks run on exit; ``exit`` receives the exit status."""

    snd: Optional[Callable[[], object]] = None
    gfx: Optional[Callable[[], object]] = None
    plat: Optional[Callable[[], object]] = None
    exit: Optional[Callable[[int], object]] = None


@dataclass
class AppState:
    """Global state shared by the application and the platform layer."""

    exit_callbacks: ExitCallbacks = field(default_factory=ExitCallbacks)

    def reset(self) -> None:
        """Forget every registered exit callback."""
        self.exit_callbacks = ExitCallbacks()

    def cleanup_and_exit(self, status: int) -> NoReturn:
        """Run sound, graphics and platform clean-up, then the exit hook.

        The exit hook is expected not to return (for example ``sys.exit``).
        If it is missing or returns, :class:`RuntimeError` is raised.
        """
        callbacks = self.exit_callbacks
        for cleanup in (callbacks.snd, callbacks.gfx, callbacks.plat):
            if cleanup is not None:
                cleanup()
        if callbacks.exit is not None:
            callbacks.exit(status)
        raise RuntimeError(
            "exit callback is missing or returned; cannot possibly continue"
        )