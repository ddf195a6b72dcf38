
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Finding:
    """Single success/warning/failure entry reported by conftest."""
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(data: dict) -> "Finding":
        metadata = data.get("metadata")
        return Finding(
            message=str(data.get("msg", "")),
            metadata=metadata if isinstance(metadata, dict) else {},
        )

    def policy_id(self, key: str) -> str | None:
        """Return the policy identifier stored under metadata.details[key].

        Missing or mistyped metadata is not an error; it just means the
        finding carries no policy ID.
        """
        details = self.metadata.get("details")
        if not isinstance(details, dict):
            return None
        value = details.get(key)
        if not isinstance(value, str) or not value:
            return None
        return value

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"msg": self.message}
        if self.metadata:
            payload["metadata"] = self.metadata
        return payload


@dataclass(frozen=True)
class CheckResult:
    """Per-file conftest result."""
    filename: str
    namespace: str | None = None
    successes: int = 0
    warnings: tuple[Finding, ...] = ()
    failures: tuple[Finding, ...] = ()
    exceptions: tuple[Finding, ...] = ()

    @staticmethod
    def from_dict(data: dict) -> "CheckResult":
        successes = data.get("successes", 0)
        if isinstance(successes, list):
            successes = len(successes)
        return CheckResult(
            filename=str(data.get("filename", "")),
            namespace=data.get("namespace"),
            successes=int(successes or 0),
            warnings=_findings(data.get("warnings")),
            failures=_findings(data.get("failures")),
            exceptions=_findings(data.get("exceptions")),
        )

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"filename": self.filename}
        if self.namespace is not None:
            payload["namespace"] = self.namespace
        payload["successes"] = self.successes
        payload["warnings"] = [item.to_dict() for item in self.warnings]
        payload["failures"] = [item.to_dict() for item in self.failures]
        if self.exceptions:
            payload["exceptions"] = [item.to_dict() for item in self.exceptions]
        return payload


def _findings(items: list | None) -> tuple[Finding, ...]:
    return tuple(Finding.from_dict(item) for item in items or [] if isinstance(item, dict))


@dataclass
class SeverityTally:
    count: int = 0
    policy_ids: set[str] = field(default_factory=set)

    def add(self, policy_id: str | None) -> None:
        self.count += 1
        if policy_id:
            self.policy_ids.add(policy_id)

    def to_dict(self) -> dict:
        return {"count": self.count, "policies": sorted(self.policy_ids)}


@dataclass
class Aggregation:
    """Rendered finding lines plus per-severity tallies for one run."""
    successes: int = 0
    failures: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    failure_tally: SeverityTally = field(default_factory=SeverityTally)
    warning_tally: SeverityTally = field(default_factory=SeverityTally)


@dataclass
class MetricsSubmission:
    source: str
    successes: int
    warnings: SeverityTally
    failures: SeverityTally
    results: list[CheckResult] | None = None

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "source": self.source,
            "successes": self.successes,
            "warnings": self.warnings.to_dict(),
            "failures": self.failures.to_dict(),
        }
        if self.results is not None:
            payload["details"] = [result.to_dict() for result in self.results]
        return payload


@dataclass(frozen=True)
class PullTarget:
    """Authenticated pull URL plus environment overrides for `conftest pull`."""
    url: str
    env: dict[str, str] = field(default_factory=dict)
    credentials_file: str | None = None


@dataclass
class RunSummary:
    """Outcome of a run, used by the CLI to pick the exit status."""
    aggregation: Aggregation
    pulled: bool = False
    commented: bool = False
    metrics_sent: bool = False

    @property
    def has_failures(self) -> bool:
        return bool(self.aggregation.failures)
