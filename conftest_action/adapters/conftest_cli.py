
from __future__ import annotations

import json
import logging
import os
import subprocess

from jsonschema import ValidationError, validate

from conftest_action.core.contracts import load_schema
from conftest_action.core.errors import PullError, TestInvocationError
from conftest_action.core.models import CheckResult
from conftest_action.core.redaction import redact_text


logger = logging.getLogger(__name__)


class ConftestCli:
    """Run the conftest binary for the pull and test steps.

    `test` deliberately ignores the exit status: conftest exits non-zero when
    policies fail, and a flag error is detected by the output not being JSON.
    """
    def __init__(self, tool_path: str, timeout_s: float | None = None) -> None:
        self.tool_path = tool_path
        self.timeout_s = timeout_s

    def pull(self, url: str, env: dict[str, str]) -> None:
        cmd = [self.tool_path, "pull", url]
        logger.debug("Running %s", redact_text(" ".join(cmd)))
        try:
            proc = subprocess.run(
                cmd,
                env={**os.environ, **env},
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise PullError(f"running conftest pull: timed out after {exc.timeout}s") from exc
        except OSError as exc:
            raise PullError(f"running conftest pull: {exc}") from exc

        if proc.returncode != 0:
            raise PullError(f"running conftest pull: {redact_text(proc.stderr or '').strip()}")

    def test(self, flags: list[str], files: list[str]) -> list[CheckResult]:
        cmd = [self.tool_path, "test", "--no-color", "--output", "json", *flags, *files]
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout_s,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise TestInvocationError(f"conftest test timed out after {exc.timeout}s") from exc
        except OSError as exc:
            raise TestInvocationError(f"running conftest test: {exc}") from exc

        logger.debug("conftest test exited with %s", proc.returncode)
        return parse_results(proc.stdout or "")


def parse_results(output: str) -> list[CheckResult]:
    """Parse `conftest test --output json` output into CheckResults.

    Raises:
        TestInvocationError: With the raw output as message when it is not a
            valid result list; it is usually conftest's own error text.
    """
    try:
        raw = json.loads(output)
        validate(instance=raw, schema=load_schema("check_results"))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise TestInvocationError(output.strip() or "conftest produced no output") from exc
    return [CheckResult.from_dict(item) for item in raw]
