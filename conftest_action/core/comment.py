
from __future__ import annotations

HEADER = "**Conftest has identified issues with your resources**"
FAILURES_INTRO = (
    "The following policy violations were identified. "
    "These are blocking and must be remediated before proceeding."
)
WARNINGS_INTRO = (
    "The following warnings were identified. "
    "These are issues that indicate the resources are not following best practices."
)


def render_comment(failures: list[str], warnings: list[str], docs_url: str = "") -> str:
    """Render the pull request comment body.

    Notes:
        The wording and blank-line layout are user-facing and kept stable, so
        sections are emitted with explicit branches rather than a template
        engine.
    """
    parts = [f"{HEADER}\n"]
    if failures:
        parts.append(f"\n{FAILURES_INTRO}\n\n")
        parts.extend(f"* {line}\n" for line in failures)
    if warnings:
        parts.append(f"\n{WARNINGS_INTRO}\n\n")
        parts.extend(f"* {line}\n" for line in warnings)
    parts.append("\n")
    if docs_url:
        parts.append(f"For more information, see the [policy documentation]({docs_url}).\n")
    return "".join(parts)


def build_comment_payload(body: str) -> dict:
    return {"body": body}
