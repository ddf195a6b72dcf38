
from __future__ import annotations

import logging
import urllib.request
from typing import Callable

from conftest_action.adapters.http_json import DEFAULT_TIMEOUT_S, HttpTransportError, post_json
from conftest_action.core.errors import CommentError


logger = logging.getLogger(__name__)


class GitHubCommentPublisher:
    """Create a pull request comment through the GitHub REST API."""
    def __init__(
        self,
        comment_url: str,
        token: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        urlopen_fn: Callable[..., object] = urllib.request.urlopen,
    ) -> None:
        self.comment_url = comment_url
        self.token = token
        self.timeout_s = timeout_s
        self.urlopen_fn = urlopen_fn

    def publish(self, payload: dict) -> None:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"token {self.token}",
        }
        logger.info("Posting comment to %s", self.comment_url)
        try:
            response = post_json(
                self.comment_url,
                payload,
                headers=headers,
                timeout_s=self.timeout_s,
                urlopen_fn=self.urlopen_fn,
            )
        except HttpTransportError as exc:
            raise CommentError(f"submitting comment: {exc}") from exc
        if not response.ok:
            raise CommentError(f"submitting comment: HTTP {response.status}: {response.body}")
