
from __future__ import annotations

from typing import Mapping

from conftest_action.core.config import TEST_FLAG_OPTIONS


def build_test_flags(options: Mapping[str, str | None]) -> list[str]:
    """Translate option values into `conftest test` flags.

    Values are stripped like every other boolean input. Unset, empty and
    "false" values are dropped, "true" becomes a bare flag,
    anything else is passed as the flag's argument. Output follows
    TEST_FLAG_OPTIONS order regardless of the mapping's order.
    """
    args: list[str] = []
    for name in TEST_FLAG_OPTIONS:
        value = (options.get(name) or "").strip()
        if not value or value.lower() == "false":
            continue
        flag = flag_name(name)
        if value.lower() == "true":
            args.append(flag)
        else:
            args.extend([flag, value])
    return args


def flag_name(name: str) -> str:
    return f"--{name.replace('_', '-').lower()}"
