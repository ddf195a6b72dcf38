
from __future__ import annotations

import logging
import urllib.request
from typing import Callable

from conftest_action.adapters.http_json import DEFAULT_TIMEOUT_S, HttpTransportError, post_json
from conftest_action.core.errors import MetricsError
from conftest_action.core.models import MetricsSubmission
from conftest_action.core.redaction import redact_text


logger = logging.getLogger(__name__)


class HttpMetricsPublisher:
    """POST metrics submissions to a collector with optional bearer auth."""
    def __init__(
        self,
        url: str,
        token: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        urlopen_fn: Callable[..., object] = urllib.request.urlopen,
    ) -> None:
        self.url = url
        self.token = token
        self.timeout_s = timeout_s
        self.urlopen_fn = urlopen_fn

    def publish(self, submission: MetricsSubmission) -> None:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        logger.info("Submitting metrics to %s", redact_text(self.url))
        try:
            response = post_json(
                self.url,
                submission.to_dict(),
                headers=headers,
                timeout_s=self.timeout_s,
                urlopen_fn=self.urlopen_fn,
            )
        except HttpTransportError as exc:
            raise MetricsError(f"submitting metrics: {exc}") from exc
        if not response.ok:
            raise MetricsError(f"submitting metrics: HTTP {response.status}: {response.body}")
