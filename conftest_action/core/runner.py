
from __future__ import annotations

import logging

from conftest_action.core.aggregate import aggregate
from conftest_action.core.comment import build_comment_payload, render_comment
from conftest_action.core.config import Settings
from conftest_action.core.errors import MetricsError, PolicyViolation
from conftest_action.core.flags import build_test_flags
from conftest_action.core.metrics import build_submission
from conftest_action.core.models import Aggregation, CheckResult, RunSummary
from conftest_action.core.pull import compose_pull_url, remove_credentials
from conftest_action.core.redaction import redact_text
from conftest_action.ports.conftest import Puller, Tester
from conftest_action.ports.publisher import CommentPublisher, MetricsPublisher


logger = logging.getLogger(__name__)

NO_VIOLATIONS_MESSAGE = "No policy violations found."


class ActionRunner:
    def __init__(
        self,
        puller: Puller,
        tester: Tester,
        comment_publisher: CommentPublisher | None = None,
        metrics_publisher: MetricsPublisher | None = None,
        credentials_dir: str = ".",
    ) -> None:
        self.puller = puller
        self.tester = tester
        self.comment_publisher = comment_publisher
        self.metrics_publisher = metrics_publisher
        self.credentials_dir = credentials_dir

    def run(self, settings: Settings) -> RunSummary:
        """Pull, test, and report for one CI invocation.

        Args:
            settings (Settings): Resolved action inputs.

        Returns:
            RunSummary: Aggregated findings plus which reporting steps ran.

        Notes:
            Every step runs once, in order. Metrics failures are logged and
            swallowed; every other error propagates to the caller. The exit
            decision is left to enforce_exit_policy so that no-fail never
            changes what gets reported.
        """
        settings.validate()

        target = compose_pull_url(settings.pull_url, settings.pull_secret, self.credentials_dir)
        if target is not None:
            logger.info("Pulling policies from %s", redact_text(target.url, (settings.pull_secret,)))
            try:
                self.puller.pull(target.url, target.env)
            finally:
                remove_credentials(target)

        files = settings.file_list()
        logger.info("Testing %d path(s) with conftest", len(files))
        results = self.tester.test(build_test_flags(settings.test_options()), files)

        aggregation = aggregate(results, settings.policy_id_key)
        print_results(aggregation)
        summary = RunSummary(aggregation=aggregation, pulled=target is not None)

        if settings.metrics_url and self.metrics_publisher is not None:
            summary.metrics_sent = self._submit_metrics(settings, aggregation, results)

        if not aggregation.failures and not aggregation.warnings:
            print(NO_VIOLATIONS_MESSAGE)
            return summary

        if settings.add_comment and self.comment_publisher is not None:
            body = render_comment(aggregation.failures, aggregation.warnings, settings.docs_url)
            self.comment_publisher.publish(build_comment_payload(body))
            summary.commented = True

        return summary

    def _submit_metrics(
        self,
        settings: Settings,
        aggregation: Aggregation,
        results: list[CheckResult],
    ) -> bool:
        submission = build_submission(
            settings.metrics_source,
            aggregation,
            results if settings.metrics_details else None,
        )
        try:
            self.metrics_publisher.publish(submission)
        except MetricsError as exc:
            logger.warning("Metrics submission failed: %s", exc)
            return False
        return True


def print_results(aggregation: Aggregation) -> None:
    for line in aggregation.failures:
        print(f"FAIL - {line}")
    for line in aggregation.warnings:
        print(f"WARN - {line}")
    total = aggregation.successes + len(aggregation.failures) + len(aggregation.warnings)
    print(
        f"{total} tests, {aggregation.successes} passed, "
        f"{len(aggregation.warnings)} warnings, {len(aggregation.failures)} failures"
    )


def enforce_exit_policy(summary: RunSummary, no_fail: bool) -> None:
    """Raise PolicyViolation when failures were found and no-fail is unset."""
    if summary.has_failures and not no_fail:
        raise PolicyViolation(len(summary.aggregation.failures))
