from __future__ import annotations


class AcquisitionError(RuntimeError):
    """Camera or detection model could not be made ready for play."""


class InvalidTransition(RuntimeError):
    """A phase change was requested that the session state machine does not allow."""
