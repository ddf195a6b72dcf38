
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

from conftest_action.core.errors import ConfigurationError


@dataclass(frozen=True)
class Option:
    name: str
    env: str
    default: str | None = None


OPTIONS = (
    Option("files", "FILES"),
    Option("policy", "POLICY", "policy"),
    Option("data", "DATA"),
    Option("all-namespaces", "ALL_NAMESPACES", "true"),
    Option("combine", "COMBINE", "false"),
    Option("pull-url", "PULL_URL"),
    Option("pull-secret", "PULL_SECRET"),
    Option("add-comment", "ADD_COMMENT", "true"),
    Option("docs-url", "DOCS_URL"),
    Option("no-fail", "NO_FAIL", "false"),
    Option("gh-token", "GITHUB_TOKEN"),
    Option("gh-comment-url", "GITHUB_COMMENT_URL"),
    Option("metrics-url", "METRICS_URL"),
    Option("metrics-source", "METRICS_SOURCE"),
    Option("metrics-details", "METRICS_DETAILS", "false"),
    Option("metrics-token", "METRICS_TOKEN"),
    Option("policy-id-key", "POLICY_ID_KEY", "policyID"),
)

OPTION_NAMES = tuple(option.name for option in OPTIONS)

# Options forwarded to `conftest test`, in emission order.
TEST_FLAG_OPTIONS = ("combine", "policy", "all-namespaces", "data")


def is_true(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


def load_config_file(path: str) -> dict[str, str]:
    """Load option values from a YAML or JSON file keyed by option name.

    Args:
        path (str): Path to a .yaml/.yml/.json file.

    Returns:
        dict[str, str]: Option values as strings; booleans become "true"/"false"
            and lists (e.g. files) are joined with spaces.
    """
    ext = Path(path).suffix.lower()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            if ext in {".yaml", ".yml"}:
                data = yaml.safe_load(handle)
            elif ext == ".json":
                data = json.load(handle)
            else:
                raise ConfigurationError(f"Unsupported config file extension: {ext}")
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Unable to read config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    unknown = sorted(set(data) - set(OPTION_NAMES))
    if unknown:
        raise ConfigurationError(f"Unknown option(s) in {path}: {', '.join(unknown)}")

    values: dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, bool):
            values[key] = "true" if value else "false"
        elif isinstance(value, list):
            values[key] = " ".join(str(item) for item in value)
        else:
            values[key] = str(value)
    return values


def resolve_options(
    environ: Mapping[str, str],
    file_values: Mapping[str, str] | None = None,
    overrides: Mapping[str, str | None] | None = None,
) -> dict[str, str | None]:
    """Merge option sources: overrides > environment > config file > default.

    Notes:
        GitHub Actions exports every declared input, so an empty environment
        variable means "not provided" and falls through to the next source.
    """
    file_values = file_values or {}
    overrides = overrides or {}
    resolved: dict[str, str | None] = {}
    for option in OPTIONS:
        value = overrides.get(option.name)
        if not value:
            value = environ.get(option.env) or None
        if not value:
            value = file_values.get(option.name) or None
        resolved[option.name] = value if value else option.default
    return resolved


@dataclass
class Settings:
    files: str = ""
    policy: str | None = "policy"
    data: str | None = None
    all_namespaces: str | None = "true"
    combine: str | None = "false"
    pull_url: str = ""
    pull_secret: str = ""
    add_comment: bool = True
    docs_url: str = ""
    no_fail: bool = False
    gh_token: str = ""
    gh_comment_url: str = ""
    metrics_url: str = ""
    metrics_source: str = ""
    metrics_details: bool = False
    metrics_token: str = ""
    policy_id_key: str = "policyID"

    @staticmethod
    def from_options(values: Mapping[str, str | None]) -> "Settings":
        def text(name: str) -> str:
            return values.get(name) or ""

        return Settings(
            files=text("files"),
            policy=values.get("policy"),
            data=values.get("data"),
            all_namespaces=values.get("all-namespaces"),
            combine=values.get("combine"),
            pull_url=text("pull-url"),
            pull_secret=text("pull-secret"),
            add_comment=is_true(values.get("add-comment")),
            docs_url=text("docs-url"),
            no_fail=is_true(values.get("no-fail")),
            gh_token=text("gh-token"),
            gh_comment_url=text("gh-comment-url"),
            metrics_url=text("metrics-url"),
            metrics_source=text("metrics-source"),
            metrics_details=is_true(values.get("metrics-details")),
            metrics_token=text("metrics-token"),
            policy_id_key=text("policy-id-key") or "policyID",
        )

    @staticmethod
    def from_env(environ: Mapping[str, str]) -> "Settings":
        return Settings.from_options(resolve_options(environ))

    def test_options(self) -> dict[str, str | None]:
        return {
            "combine": self.combine,
            "policy": self.policy,
            "all-namespaces": self.all_namespaces,
            "data": self.data,
        }

    def file_list(self) -> list[str]:
        return split_files(self.files)

    def validate(self) -> None:
        """Fail fast on missing inputs before any subprocess or HTTP call."""
        if not self.file_list():
            raise ConfigurationError("at least one file to test must be supplied")
        if self.metrics_url and not self.metrics_source:
            raise ConfigurationError("metrics-source is required when metrics-url is set")
        if self.add_comment:
            missing = [
                name
                for name, value in (("gh-token", self.gh_token), ("gh-comment-url", self.gh_comment_url))
                if not value
            ]
            if missing:
                raise ConfigurationError(
                    f"missing {', '.join(missing)} (required when add-comment is true)"
                )


def split_files(value: str | None) -> list[str]:
    if not value:
        return []
    return value.split()
