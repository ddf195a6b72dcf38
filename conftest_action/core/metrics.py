
from __future__ import annotations

from conftest_action.core.errors import ConfigurationError
from conftest_action.core.models import Aggregation, CheckResult, MetricsSubmission


def build_submission(
    source: str,
    aggregation: Aggregation,
    results: list[CheckResult] | None = None,
) -> MetricsSubmission:
    """Summarize a run for the metrics collector.

    Args:
        source (str): Caller-supplied identifier of the submitting repository.
        aggregation (Aggregation): Counts and policy IDs from the run.
        results (list[CheckResult] | None): Full per-file results, included
            only when detailed metrics were requested.
    """
    if not source:
        raise ConfigurationError("metrics-source is required when metrics-url is set")
    return MetricsSubmission(
        source=source,
        successes=aggregation.successes,
        warnings=aggregation.warning_tally,
        failures=aggregation.failure_tally,
        results=list(results) if results is not None else None,
    )
