"""Post-action verification polling."""

from .poller import Poller
from .strategy import DEFAULT_CONFIG, RefreshConfig
from .verifier import LogTimeVerifier, NoOpVerifier, StatusChangeVerifier, Verifier, get_verifier

__all__ = [
    "DEFAULT_CONFIG",
    "LogTimeVerifier",
    "NoOpVerifier",
    "Poller",
    "RefreshConfig",
    "StatusChangeVerifier",
    "Verifier",
    "get_verifier",
]
