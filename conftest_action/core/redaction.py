
from __future__ import annotations

import re


_PATTERNS = [
    (re.compile(r"(Authorization\s*:\s*(?:Bearer|token)\s+)[^\s]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(://)[^/\s@]+@"), r"\1[REDACTED]@"),
    (re.compile(r"(aws_access_key_(?:id|secret)=)[^&\s]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(aws_session_token=)[^&\s]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(token\s*[:=])\s*[^\s]+", re.IGNORECASE), r"\1 [REDACTED]"),
    (re.compile(r"(secret\s*[:=])\s*[^\s]+", re.IGNORECASE), r"\1 [REDACTED]"),
]


def redact_text(value: str, secrets: tuple[str, ...] = ()) -> str:
    """Redact credential patterns and known secret values from text.

    Notes:
        conftest echoes the pull URL in its errors, so userinfo and S3 query
        credentials are masked before anything reaches the job log.
    """
    redacted = value
    for secret in secrets:
        if secret:
            redacted = redacted.replace(secret, "[REDACTED]")
    for pattern, repl in _PATTERNS:
        redacted = pattern.sub(repl, redacted)
    return redacted
