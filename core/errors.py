"""Error types raised by the label engine."""

from __future__ import annotations


class LabelHelperError(Exception):
    """Base class for label engine errors."""


class InstanceResolutionError(LabelHelperError):
    """Raised when no active PhotoPrism instance can be determined."""


class TransportError(LabelHelperError):
    """Raised when a single API call fails (non-2xx or network error)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LabelResolutionError(LabelHelperError):
    """Raised when a label ID cannot be resolved; aborts a remove batch."""


class LabelNotFoundError(LabelResolutionError):
    """Raised when the sample photo does not carry the requested label."""


class ResolutionTransportError(LabelResolutionError):
    """Raised when the photo detail request used for resolution fails."""


class NoItemsSelectedError(LabelHelperError):
    """Raised when a batch is started with zero identifiers."""


class EmptyLabelError(LabelHelperError):
    """Raised when the label name is blank."""


class SelectionError(LabelHelperError):
    """Raised by a selection source that cannot provide uids and a token."""

    DISABLED_FOR_ORIGIN = "disabled-for-origin"
    NO_AUTH_TOKEN = "no-auth-token"
    TRANSPORT_ERROR = "transport-error"

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class FailureGroupNotFoundError(LabelHelperError):
    """Raised when retrying a failure group index that does not exist."""


class StateFileError(LabelHelperError):
    """Raised when the local state file cannot be parsed."""
