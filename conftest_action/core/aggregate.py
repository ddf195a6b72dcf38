
from __future__ import annotations

from typing import Iterable

from conftest_action.core.models import Aggregation, CheckResult, Finding


def aggregate(results: Iterable[CheckResult], policy_id_key: str) -> Aggregation:
    """Collect rendered failure/warning lines and distinct policy IDs.

    Args:
        results (Iterable[CheckResult]): Parsed conftest results in output order.
        policy_id_key (str): Key looked up under metadata.details.

    Returns:
        Aggregation: Lines in traversal order plus per-severity tallies.
    """
    aggregation = Aggregation()
    for result in results:
        aggregation.successes += result.successes
        for finding in result.warnings:
            policy_id = finding.policy_id(policy_id_key)
            aggregation.warnings.append(render_line(result.filename, finding, policy_id))
            aggregation.warning_tally.add(policy_id)
        for finding in result.failures:
            policy_id = finding.policy_id(policy_id_key)
            aggregation.failures.append(render_line(result.filename, finding, policy_id))
            aggregation.failure_tally.add(policy_id)
    return aggregation


def render_line(filename: str, finding: Finding, policy_id: str | None) -> str:
    if policy_id:
        return f"{filename} - {policy_id}: {finding.message}"
    return f"{filename} - {finding.message}"
