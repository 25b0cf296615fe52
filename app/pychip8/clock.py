"""
Pacing helpers for drivers.

The interpreter never sleeps or reads the clock. A driver measures elapsed
time with ``Timer`` and asks a ``Pacer`` how many instructions and timer
ticks that time is worth.
"""

import time
from typing import TYPE_CHECKING, Any, Final, NamedTuple, Optional

if TYPE_CHECKING:
    from pychip8.emulator import Chip8

TIMER_HZ: Final[int] = 60
STEP_HZ: Final[int] = 600  # advisory, roughly 10 instructions per timer tick


class Timer:
    """Stopwatch on ``time.perf_counter``."""

    def __init__(self) -> None:
        self.start_time: Optional[float] = None
        self.elapsed_time: float = 0.0
        self.running: bool = False
        self._clock = time.perf_counter

    def start(self) -> None:
        if not self.running:
            self.start_time = self._clock()
            self.running = True

    def stop(self) -> None:
        if self.running:
            assert self.start_time is not None
            self.elapsed_time += self._clock() - self.start_time
            self.start_time = None
            self.running = False

    def get_elapsed_time(self) -> float:
        if self.running:
            assert self.start_time is not None
            return self.elapsed_time + (self._clock() - self.start_time)
        return self.elapsed_time

    def lap(self) -> float:
        """Elapsed time since the last lap (or start), then keep timing from now."""
        elapsed = self.get_elapsed_time()
        self.reset()
        self.start()
        return elapsed

    def reset(self) -> None:
        self.start_time = None
        self.elapsed_time = 0.0
        self.running = False

    def is_running(self) -> bool:
        return self.running

    def __str__(self) -> str:
        state = "running" if self.running else "stopped"
        return f"Timer({state}, {self.get_elapsed_time():.4f}s)"

    def __repr__(self) -> str:
        return f"Timer(running={self.running}, elapsed_time={self.elapsed_time:.6f}, start_time={self.start_time})"

    def __enter__(self) -> "Timer":
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()


class Budget(NamedTuple):
    steps: int
    ticks: int


class Pacer:
    """
    Turns elapsed wall time into instruction steps and timer ticks.

    Fractions carry over between calls so the long-run rates match
    ``step_hz`` and ``timer_hz``. Negative elapsed time is ignored.

    Catch-up stops at ``max_frame_time``: any single call counts at most
    that many seconds, so a stall (debugger, window drag) is dropped rather
    than replayed as a burst of steps. Drivers that want full catch-up pass
    a larger value.
    """

    def __init__(self, step_hz: int = STEP_HZ, timer_hz: int = TIMER_HZ, max_frame_time: float = 0.25) -> None:
        if step_hz <= 0 or timer_hz <= 0:
            raise ValueError("step_hz and timer_hz must be positive")
        if max_frame_time <= 0:
            raise ValueError("max_frame_time must be positive")
        self.step_hz = step_hz
        self.timer_hz = timer_hz
        self.max_frame_time = max_frame_time
        self._step_debt: float = 0.0
        self._tick_debt: float = 0.0

    def __repr__(self) -> str:
        return f"Pacer(step_hz={self.step_hz}, timer_hz={self.timer_hz}, max_frame_time={self.max_frame_time})"

    def advance(self, elapsed: float) -> Budget:
        if elapsed <= 0:
            return Budget(0, 0)
        elapsed = min(elapsed, self.max_frame_time)

        self._step_debt += elapsed * self.step_hz
        self._tick_debt += elapsed * self.timer_hz
        steps = int(self._step_debt)
        ticks = int(self._tick_debt)
        self._step_debt -= steps
        self._tick_debt -= ticks
        return Budget(steps, ticks)

    def run(self, chip8: "Chip8", elapsed: float) -> Budget:
        """
        Issue the steps (and, for decoupled timers, the ticks) owed for ``elapsed``.

        Ticks are spread evenly between the steps. A halted machine stops the
        loop early; the returned budget is what was owed, not what ran.
        """
        budget = self.advance(elapsed)
        decoupled = chip8.timers_decoupled
        ticks_done = 0

        for i in range(budget.steps):
            if chip8.halted:
                break
            chip8.step()
            if decoupled:
                due = (i + 1) * budget.ticks // budget.steps
                while ticks_done < due:
                    chip8.tick_timers()
                    ticks_done += 1

        if decoupled and not chip8.halted:
            while ticks_done < budget.ticks:
                chip8.tick_timers()
                ticks_done += 1

        return budget

    def reset(self) -> None:
        self._step_debt = 0.0
        self._tick_debt = 0.0
