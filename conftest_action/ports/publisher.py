
from __future__ import annotations

from typing import Protocol

from conftest_action.core.models import MetricsSubmission


class CommentPublisher(Protocol):
    """Publishing boundary for pull request comments."""
    def publish(self, payload: dict) -> None:
        """Post a comment payload of the form {"body": text}.

        Raises:
            CommentError: When the comment is not accepted.
        """
        ...


class MetricsPublisher(Protocol):
    """Publishing boundary for run metrics."""
    def publish(self, submission: MetricsSubmission) -> None:
        """Send a metrics submission to the collector.

        Raises:
            MetricsError: When the submission is not accepted.
        """
        ...
