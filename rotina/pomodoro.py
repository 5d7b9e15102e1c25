# rotina/pomodoro.py
from __future__ import annotations

DEFAULT_DURATION_S = 25 * 60


class Pomodoro:
    """Countdown timer state; the caller drives it with `tick`."""

    def __init__(self, duration_s: int = DEFAULT_DURATION_S) -> None:
        if duration_s <= 0:
            raise ValueError("duration_s must be positive")
        self.duration_s = int(duration_s)
        self.remaining_s = int(duration_s)
        self.running = False

    def start(self) -> bool:
        if self.running or self.remaining_s <= 0:
            return False
        self.running = True
        return True

    def stop(self) -> None:
        self.running = False

    def reset(self) -> None:
        self.running = False
        self.remaining_s = self.duration_s

    def tick(self, seconds: int = 1) -> bool:
        """Advance the countdown; True exactly once, when it reaches zero."""
        if not self.running:
            return False
        self.remaining_s = max(0, self.remaining_s - int(seconds))
        if self.remaining_s == 0:
            self.running = False
            return True
        return False

    @property
    def finished(self) -> bool:
        return self.remaining_s == 0

    def display(self) -> str:
        minutes, seconds = divmod(self.remaining_s, 60)
        return f"{minutes:02d}:{seconds:02d}"
