import http.client
from pathlib import Path

import pytest

from conftest_action.adapters.metrics_http import HttpMetricsPublisher
from conftest_action.core import errors
from conftest_action.core.config import Settings
from conftest_action.core.errors import (
    CommentError,
    ConfigurationError,
    MetricsError,
    PolicyViolation,
    PullError,
)
from conftest_action.core.models import CheckResult, MetricsSubmission
from conftest_action.core.runner import NO_VIOLATIONS_MESSAGE, ActionRunner, enforce_exit_policy
from conftest_action.tests.http_fakes import RecordingUrlopen


FAILING = [
    CheckResult.from_dict(
        {
            "filename": "a.yaml",
            "successes": 1,
            "failures": [{"msg": "bad", "metadata": {"details": {"policyID": "P1"}}}],
            "warnings": [{"msg": "meh"}],
        }
    )
]
CLEAN = [CheckResult.from_dict({"filename": "a.yaml", "successes": 3})]


class FakePuller:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def pull(self, url: str, env: dict[str, str]) -> None:
        self.calls.append((url, env))
        if self.error is not None:
            raise self.error


class FakeTester:
    def __init__(self, results: list[CheckResult], error: Exception | None = None) -> None:
        self.results = results
        self.error = error
        self.calls: list[tuple[list[str], list[str]]] = []

    def test(self, flags: list[str], files: list[str]) -> list[CheckResult]:
        self.calls.append((flags, files))
        if self.error is not None:
            raise self.error
        return self.results


class RecordingPublisher:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.published: list = []

    def publish(self, payload) -> None:
        self.published.append(payload)
        if self.error is not None:
            raise self.error


def _settings(**overrides) -> Settings:
    values = {
        "files": "a.yaml b.yaml",
        "add_comment": True,
        "gh_token": "ghp",
        "gh_comment_url": "https://api.github.com/c",
    }
    values.update(overrides)
    return Settings(**values)


def _runner(results, puller=None, tester=None, comments=None, metrics=None, tmp_path=None) -> ActionRunner:
    return ActionRunner(
        puller=puller or FakePuller(),
        tester=tester or FakeTester(results),
        comment_publisher=comments,
        metrics_publisher=metrics,
        credentials_dir=str(tmp_path) if tmp_path else ".",
    )


def test_clean_run_skips_comment(capsys) -> None:
    comments = RecordingPublisher()
    summary = _runner(CLEAN, comments=comments).run(_settings())

    assert comments.published == []
    assert summary.commented is False
    assert not summary.has_failures
    out = capsys.readouterr().out
    assert NO_VIOLATIONS_MESSAGE in out
    assert "3 tests, 3 passed, 0 warnings, 0 failures" in out
    enforce_exit_policy(summary, no_fail=False)


def test_failures_post_comment_and_violate_policy(capsys) -> None:
    comments = RecordingPublisher()
    tester = FakeTester(FAILING)
    summary = _runner(FAILING, tester=tester, comments=comments).run(_settings(docs_url="https://docs"))

    assert tester.calls == [(["--policy", "policy", "--all-namespaces"], ["a.yaml", "b.yaml"])]
    assert summary.commented is True
    body = comments.published[0]["body"]
    assert "* a.yaml - P1: bad\n" in body
    assert "* a.yaml - meh\n" in body
    assert "(https://docs)" in body
    out = capsys.readouterr().out
    assert "FAIL - a.yaml - P1: bad" in out
    assert "WARN - a.yaml - meh" in out
    with pytest.raises(PolicyViolation) as exc:
        enforce_exit_policy(summary, no_fail=False)
    assert exc.value.failure_count == 1


def test_no_fail_keeps_reporting_identical() -> None:
    strict_comments = RecordingPublisher()
    lenient_comments = RecordingPublisher()
    strict_metrics = RecordingPublisher()
    lenient_metrics = RecordingPublisher()
    metrics_opts = {"metrics_url": "https://metrics", "metrics_source": "repo"}

    strict = _runner(FAILING, comments=strict_comments, metrics=strict_metrics).run(_settings(**metrics_opts))
    lenient = _runner(FAILING, comments=lenient_comments, metrics=lenient_metrics).run(
        _settings(no_fail=True, **metrics_opts)
    )

    assert strict_comments.published == lenient_comments.published
    assert strict_metrics.published[0].to_dict() == lenient_metrics.published[0].to_dict()
    with pytest.raises(PolicyViolation):
        enforce_exit_policy(strict, no_fail=False)
    enforce_exit_policy(lenient, no_fail=True)


def test_metrics_failure_is_not_fatal(caplog) -> None:
    metrics = RecordingPublisher(error=MetricsError("submitting metrics: HTTP 500: boom"))
    summary = _runner(CLEAN, metrics=metrics).run(
        _settings(metrics_url="https://metrics", metrics_source="repo")
    )

    assert summary.metrics_sent is False
    assert "Metrics submission failed" in caplog.text
    enforce_exit_policy(summary, no_fail=False)


def test_metrics_sent_for_clean_runs_with_details() -> None:
    metrics = RecordingPublisher()
    summary = _runner(CLEAN, metrics=metrics).run(
        _settings(metrics_url="https://metrics", metrics_source="repo", metrics_details=True)
    )

    assert summary.metrics_sent is True
    submission = metrics.published[0]
    assert isinstance(submission, MetricsSubmission)
    assert submission.successes == 3
    assert submission.results == CLEAN


def test_comment_failure_is_fatal() -> None:
    comments = RecordingPublisher(error=CommentError("submitting comment: HTTP 404: Not Found"))

    with pytest.raises(CommentError):
        _runner(FAILING, comments=comments).run(_settings(no_fail=True))


def test_add_comment_disabled_skips_publisher() -> None:
    comments = RecordingPublisher()
    summary = _runner(FAILING, comments=comments).run(_settings(add_comment=False))

    assert comments.published == []
    assert summary.commented is False


def test_pull_runs_before_test_with_composed_url(tmp_path) -> None:
    puller = FakePuller()
    summary = _runner(CLEAN, puller=puller, tmp_path=tmp_path).run(
        _settings(pull_url="s3::https://bucket/policy", pull_secret="aws_access_key_id=K")
    )

    assert puller.calls == [("s3::https://bucket/policy?aws_access_key_id=K", {})]
    assert summary.pulled is True


def test_gcs_pull_gets_credentials_env(tmp_path) -> None:
    puller = FakePuller()
    _runner(CLEAN, puller=puller, tmp_path=tmp_path).run(
        _settings(pull_url="gcs::https://bucket/policy", pull_secret='{"k": "v"}')
    )

    url, env = puller.calls[0]
    assert url == "gcs::https://bucket/policy"
    assert env == {"GOOGLE_APPLICATION_CREDENTIALS": str((tmp_path / "gcs.json").resolve())}


def test_pull_failure_stops_before_testing() -> None:
    tester = FakeTester(CLEAN)
    puller = FakePuller(error=PullError("running conftest pull: 401"))

    with pytest.raises(PullError):
        _runner(CLEAN, puller=puller, tester=tester).run(_settings(pull_url="https://host/p"))

    assert tester.calls == []


def test_configuration_errors_precede_external_calls() -> None:
    puller = FakePuller()
    tester = FakeTester(CLEAN)

    with pytest.raises(ConfigurationError):
        _runner(CLEAN, puller=puller, tester=tester).run(_settings(files="", pull_url="https://host/p"))

    assert puller.calls == []
    assert tester.calls == []


def test_test_invocation_error_propagates() -> None:
    tester = FakeTester([], error=errors.TestInvocationError("Error: unknown flag"))

    with pytest.raises(errors.TestInvocationError):
        _runner([], tester=tester).run(_settings())


def test_broken_metrics_response_is_not_fatal(caplog) -> None:
    urlopen = RecordingUrlopen(error=http.client.BadStatusLine("garbage"))
    metrics = HttpMetricsPublisher("https://metrics", urlopen_fn=urlopen)
    summary = _runner(CLEAN, metrics=metrics).run(
        _settings(metrics_url="https://metrics", metrics_source="repo")
    )

    assert len(urlopen.calls) == 1
    assert summary.metrics_sent is False
    assert "Metrics submission failed" in caplog.text
    enforce_exit_policy(summary, no_fail=False)


class FileCheckingPuller(FakePuller):
    def pull(self, url: str, env: dict[str, str]) -> None:
        self.present = Path(env["GOOGLE_APPLICATION_CREDENTIALS"]).exists()
        super().pull(url, env)


def test_gcs_credentials_removed_after_pull(tmp_path) -> None:
    puller = FileCheckingPuller()
    _runner(CLEAN, puller=puller, tmp_path=tmp_path).run(
        _settings(pull_url="gcs::https://bucket/policy", pull_secret='{"k": "v"}')
    )

    assert puller.present is True
    assert not (tmp_path / "gcs.json").exists()


def test_gcs_credentials_removed_when_pull_fails(tmp_path) -> None:
    puller = FileCheckingPuller(error=PullError("running conftest pull: 403"))

    with pytest.raises(PullError):
        _runner(CLEAN, puller=puller, tmp_path=tmp_path).run(
            _settings(pull_url="gcs::https://bucket/policy", pull_secret='{"k": "v"}')
        )

    assert puller.present is True
    assert not (tmp_path / "gcs.json").exists()
