
from __future__ import annotations

import http.client
import json
import urllib.request
from dataclasses import dataclass
from typing import Callable
from urllib import error as url_error

from conftest_action.core.version import user_agent


DEFAULT_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpTransportError(OSError):
    """Raised when a request never produced a usable HTTP response."""


def post_json(
    url: str,
    payload: dict,
    headers: dict[str, str] | None = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    urlopen_fn: Callable[..., object] = urllib.request.urlopen,
) -> HttpResponse:
    """POST a JSON document and return the status and body.

    Error statuses are returned, not raised, so callers decide how fatal
    they are. Malformed URLs, connection failures, timeouts and broken
    responses raise HttpTransportError.
    """
    data = json.dumps(payload).encode("utf-8")
    request_headers = {
        "Content-Type": "application/json",
        "User-Agent": user_agent(),
        **(headers or {}),
    }
    try:
        req = urllib.request.Request(url, data=data, headers=request_headers, method="POST")
        with urlopen_fn(req, timeout=timeout_s) as response:
            status = getattr(response, "status", None) or response.getcode()
            return HttpResponse(status=int(status), body=_decode(response.read()))
    except url_error.HTTPError as exc:
        return HttpResponse(status=exc.code, body=_decode(exc.read() or b""))
    except (url_error.URLError, http.client.HTTPException, ValueError, OSError) as exc:
        raise HttpTransportError(f"{type(exc).__name__}: {exc}") from exc


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")
