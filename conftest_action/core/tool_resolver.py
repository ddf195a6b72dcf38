from __future__ import annotations

import os
import shutil
import sys

from dataclasses import dataclass
from pathlib import Path

from conftest_action.core.errors import ToolResolutionError


TOOL_NAME = "conftest"
TOOL_ENV = "CONFTEST_BIN"


@dataclass(frozen=True)
class ResolvedTool:
    path: str
    source: str


def resolve_conftest(explicit_path: str | None = None) -> ResolvedTool:
    """Resolve a runnable conftest binary.

    Resolution order:
    1. Explicit CLI path override
    2. CONFTEST_BIN environment variable
    3. PATH lookup
    """
    if explicit_path:
        path = Path(explicit_path)
        if _is_runnable(path):
            return ResolvedTool(path=str(path.resolve()), source="explicit")
        raise ToolResolutionError(f"Tool path not runnable: {path}")

    from_env = os.environ.get(TOOL_ENV)
    if from_env:
        path = Path(from_env)
        if _is_runnable(path):
            return ResolvedTool(path=str(path.resolve()), source="env")
        raise ToolResolutionError(f"{TOOL_ENV} is not runnable: {path}")

    found = shutil.which(_binary_name())
    if found:
        return ResolvedTool(path=found, source="path")

    raise ToolResolutionError(
        "Unable to locate the conftest binary. "
        f"Install conftest on PATH, set {TOOL_ENV}, or pass --conftest-path."
    )


def _binary_name() -> str:
    if sys.platform.startswith("win"):
        return f"{TOOL_NAME}.exe"
    return TOOL_NAME


def _is_runnable(path: Path) -> bool:
    if not path.exists() or not path.is_file():
        return False
    if sys.platform.startswith("win"):
        return True
    return os.access(path, os.X_OK)
