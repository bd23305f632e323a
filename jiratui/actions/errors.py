"""Failure taxonomy for the action pipeline.

ValidationError and RemoteError end an action and roll back the optimistic
update. VerificationError and VerificationTimeout only concern the polling
phase: the remote change already happened, so nothing is rolled back.
"""


class ActionError(Exception):
    """Base class for action pipeline failures."""


class ValidationError(ActionError):
    """A local precondition failed; nothing was sent anywhere."""


class RemoteError(ActionError):
    """The remote mutation (or clipboard/browser call) failed.

    `retryable` is a hint for the UI; nothing retries automatically.
    """

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class VerificationError(ActionError):
    """A verification read failed; counts as "not yet visible"."""


class VerificationTimeout(ActionError):
    """The change was not observed within the allowed polling attempts."""

    def __init__(self, action_name: str, attempts: int):
        super().__init__(f"{action_name} not visible after {attempts} attempts")
        self.action_name = action_name
        self.attempts = attempts
