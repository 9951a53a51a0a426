# hub/domain/errors.py
from __future__ import annotations


class HubError(Exception):
    """Base for every failure the hub reports. None of them is fatal."""
    code = "HUB_ERROR"


class ConfigurationUnavailable(HubError):
    """Store connection parameters are missing; the hub runs degraded."""
    code = "STORE_UNAVAILABLE"

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Store not configured: {', '.join(self.missing)}")


class EmptySubmission(HubError):
    """Answer text is blank after trimming. Never reaches the store."""
    code = "EMPTY_ANSWER"

    def __init__(self) -> None:
        super().__init__("Answer text is empty")


class TransientWriteFailure(HubError):
    """A merge or append failed at the store. Not retried."""
    code = "WRITE_FAILED"
