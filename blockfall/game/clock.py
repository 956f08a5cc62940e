"""
Repeating interval timers driven by elapsed milliseconds.

The engine does not read wall time itself: each step the caller passes the
frame delta, and both timers accumulate it.
"""

from __future__ import annotations


class IntervalTimer:
    """A repeating timer that fires once per whole period elapsed.

    Attributes:
        period_ms: Length of one period in milliseconds.
        elapsed_ms: Time accumulated since the last firing.
        times_fired: How many periods completed during the last tick().
    """

    def __init__(self, period_ms: float) -> None:
        """Initialize the timer.

        Args:
            period_ms: Period in milliseconds.

        Raises:
            ValueError: If period_ms is not positive.
        """
        if period_ms <= 0:
            raise ValueError(f"Timer period must be positive, got {period_ms}")
        self.period_ms = float(period_ms)
        self.elapsed_ms = 0.0
        self.times_fired = 0

    def tick(self, delta_ms: float) -> int:
        """Advance the timer.

        Args:
            delta_ms: Elapsed time since the previous tick. Negative values
                are treated as zero.

        Returns:
            Number of periods that completed during this tick.
        """
        self.elapsed_ms += max(0.0, delta_ms)
        self.times_fired = int(self.elapsed_ms // self.period_ms)
        self.elapsed_ms -= self.times_fired * self.period_ms
        return self.times_fired

    @property
    def finished(self) -> bool:
        """True if the timer fired at least once during the last tick()."""
        return self.times_fired > 0

    def reset(self) -> None:
        self.elapsed_ms = 0.0
        self.times_fired = 0


class GameClock:
    """The gravity timer and the input-repeat timer, ticked together.

    Attributes:
        gravity: Gates the fall/lock and row-clear rules.
        input_repeat: Gates horizontal movement while a direction is held.
    """

    def __init__(self, gravity_ms: float = 400, input_repeat_ms: float = 100) -> None:
        self.gravity = IntervalTimer(gravity_ms)
        self.input_repeat = IntervalTimer(input_repeat_ms)

    def tick(self, delta_ms: float) -> None:
        self.gravity.tick(delta_ms)
        self.input_repeat.tick(delta_ms)

    def reset(self) -> None:
        self.gravity.reset()
        self.input_repeat.reset()
