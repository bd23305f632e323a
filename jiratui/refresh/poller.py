"""Backoff poller driving verification after a committed action."""

from __future__ import annotations

import time
from typing import Callable, Optional

from ..actions.base import Action
from ..actions.errors import VerificationError
from ..messages import Command, RefreshPolling
from ..services.clients import Clients
from ..utils.logging import log
from .strategy import DEFAULT_CONFIG, RefreshConfig
from .verifier import NoOpVerifier, Verifier


class Poller:
    """Counts verification attempts for one action.

    The attempt counter is only advanced on the loop thread (by next_poll);
    the returned command does the waiting and the remote read.
    """

    def __init__(
        self,
        action: Action,
        config: RefreshConfig = DEFAULT_CONFIG,
        verifier: Optional[Verifier] = None,
        clients: Optional[Clients] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.action = action
        self.config = config
        self.verifier = verifier or NoOpVerifier()
        self.clients = clients or Clients()
        self._sleep = sleep
        self.attempt = 0
        self.start_time = time.monotonic()

    def get_action(self) -> Action:
        return self.action

    def get_attempt(self) -> int:
        return self.attempt

    def should_continue(self) -> bool:
        return self.attempt < self.config.max_attempts

    def elapsed(self) -> float:
        return time.monotonic() - self.start_time

    def next_poll(self) -> Command:
        """Advance the attempt counter and return the wait-then-verify command."""
        self.attempt += 1
        attempt = self.attempt
        delay = self.config.get_delay(attempt)
        action_name = self.action.name()
        verifier, clients = self.verifier, self.clients

        def command():
            self._sleep(delay)
            try:
                verified = verifier.verify(clients)
            except VerificationError as exc:
                log(f"{action_name}: verification attempt {attempt} failed: {exc}")
                return RefreshPolling(action_name=action_name, attempt=attempt, poller=self, error=exc)
            return RefreshPolling(action_name=action_name, attempt=attempt, poller=self, verified=verified)

        return command
