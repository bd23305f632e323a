"""Backoff configuration for verification polling."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RefreshConfig:
    max_attempts: int = 5
    initial_delay: float = 0.5  # seconds
    max_delay: float = 5.0
    backoff_factor: float = 2.0

    def get_delay(self, attempt: int) -> float:
        """Seconds to wait before poll `attempt` (1-based).

        0.5, 1, 2, 4, 5, 5, ... under the defaults. Once capped the delay
        stays at max_delay.
        """
        if attempt <= 1:
            return min(self.initial_delay, self.max_delay)
        delay = self.initial_delay
        for _ in range(attempt - 1):
            delay = min(delay * self.backoff_factor, self.max_delay)
        return delay

    @classmethod
    def from_settings(cls, settings) -> "RefreshConfig":
        return cls(
            max_attempts=settings.poll_max_attempts,
            initial_delay=settings.poll_initial_delay,
            max_delay=settings.poll_max_delay,
            backoff_factor=settings.poll_backoff_factor,
        )


DEFAULT_CONFIG = RefreshConfig()
