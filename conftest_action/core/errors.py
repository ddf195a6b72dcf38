from __future__ import annotations


class ActionError(RuntimeError):
    """Base class for errors that end a run with a non-zero exit."""


class ConfigurationError(ActionError):
    """Raised when required inputs are missing or malformed."""


class ToolResolutionError(ConfigurationError):
    """Raised when the conftest binary cannot be located."""


class PullError(ActionError):
    """Raised when remote policies cannot be pulled."""


class InvalidURL(PullError):
    pass


class UnsupportedPullScheme(PullError):
    pass


class TestInvocationError(ActionError):
    """Raised when `conftest test` output cannot be parsed."""


class MetricsError(ActionError):
    """Raised when a metrics submission is rejected or cannot be sent.

    Notes:
        The runner downgrades this to a log warning; metrics delivery never
        decides the exit status.
    """


class CommentError(ActionError):
    """Raised when the pull request comment cannot be posted."""


class PolicyViolation(ActionError):
    """Raised when conftest reported failures and no-fail is not set."""

    def __init__(self, failure_count: int) -> None:
        super().__init__(f"{failure_count} policy failure(s) found")
        self.failure_count = failure_count
