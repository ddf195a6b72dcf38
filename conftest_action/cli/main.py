from __future__ import annotations

"""conftest-action command-line entrypoint."""

import argparse
import logging
import os
import sys

from conftest_action.adapters.conftest_cli import ConftestCli
from conftest_action.adapters.github_comments import GitHubCommentPublisher
from conftest_action.adapters.metrics_http import HttpMetricsPublisher
from conftest_action.core.config import OPTIONS, Settings, load_config_file, resolve_options
from conftest_action.core.errors import ActionError, PolicyViolation
from conftest_action.core.runner import ActionRunner, enforce_exit_policy
from conftest_action.core.tool_resolver import resolve_conftest
from conftest_action.core.version import get_action_version


def _configure_logging() -> None:
    """Enable debug output when the runner is in debug mode.

    Notes:
        GitHub sets RUNNER_DEBUG=1 when a job is re-run with debug logging.
    """
    level = logging.DEBUG if os.environ.get("RUNNER_DEBUG") == "1" else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_timeout(value: str) -> float:
    timeout = float(value)
    if timeout <= 0:
        raise argparse.ArgumentTypeError("timeout must be positive")
    return timeout


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conftest-action",
        description="Run conftest and report policy results to a pull request and metrics collector.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_action_version()}")
    parser.add_argument("--config", default=None, help="YAML or JSON file with option values")
    parser.add_argument("--conftest-path", default=None, help="Path to the conftest binary")
    parser.add_argument(
        "--tool-timeout",
        type=_parse_timeout,
        default=None,
        help="Seconds to wait for each conftest invocation (default: no limit)",
    )
    inputs = parser.add_argument_group("action inputs", "each also read from the listed environment variable")
    for option in OPTIONS:
        default_hint = f", default {option.default!r}" if option.default is not None else ""
        inputs.add_argument(
            f"--{option.name}",
            dest=_dest(option.name),
            default=None,
            help=f"env {option.env}{default_hint}",
        )
    return parser


def _dest(name: str) -> str:
    return name.replace("-", "_")


def load_settings(args: argparse.Namespace) -> Settings:
    file_values = load_config_file(args.config) if args.config else None
    overrides = {option.name: getattr(args, _dest(option.name)) for option in OPTIONS}
    return Settings.from_options(resolve_options(os.environ, file_values, overrides))


def build_runner(settings: Settings, args: argparse.Namespace) -> ActionRunner:
    tool = resolve_conftest(args.conftest_path)
    conftest = ConftestCli(tool_path=tool.path, timeout_s=args.tool_timeout)
    comment_publisher = None
    if settings.add_comment:
        comment_publisher = GitHubCommentPublisher(settings.gh_comment_url, settings.gh_token)
    metrics_publisher = None
    if settings.metrics_url:
        metrics_publisher = HttpMetricsPublisher(settings.metrics_url, settings.metrics_token or None)
    return ActionRunner(
        puller=conftest,
        tester=conftest,
        comment_publisher=comment_publisher,
        metrics_publisher=metrics_publisher,
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns the process exit status."""
    args = build_parser().parse_args(argv)
    _configure_logging()
    try:
        settings = load_settings(args)
        settings.validate()
        runner = build_runner(settings, args)
        summary = runner.run(settings)
        enforce_exit_policy(summary, settings.no_fail)
    except PolicyViolation as exc:
        print(f"Policy check failed: {exc}", file=sys.stderr)
        return 1
    except ActionError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    if summary.has_failures:
        print("Policy failures found, but no-fail is set; exiting successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
