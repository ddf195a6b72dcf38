
from __future__ import annotations

from typing import Protocol

from conftest_action.core.models import CheckResult


class Puller(Protocol):
    """Fetches remote policy bundles before testing."""
    def pull(self, url: str, env: dict[str, str]) -> None:
        """Download policies from a go-getter style URL.

        Args:
            url (str): Fully authenticated pull URL.
            env (dict[str, str]): Extra environment for this call only.

        Raises:
            PullError: When the pull fails.
        """
        ...


class Tester(Protocol):
    """Runs the policy tests and returns parsed per-file results."""
    def test(self, flags: list[str], files: list[str]) -> list[CheckResult]:
        """Test files against the configured policies.

        Args:
            flags (list[str]): Extra `conftest test` flags.
            files (list[str]): Files and folders to test.

        Returns:
            list[CheckResult]: Results in the tool's output order.

        Raises:
            TestInvocationError: When the output is not a result list.
        """
        ...
