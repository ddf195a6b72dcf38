from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version


DIST_NAME = "conftest-action"


def get_action_version() -> str:
    """Installed distribution version, or "dev" when running from a source tree.

    Notes:
        The working directory in CI is the repository under test, so it says
        nothing about this tool's own version.
    """
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return "dev"


def user_agent() -> str:
    return f"conftest-action/{get_action_version()}"
