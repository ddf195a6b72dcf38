
from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from conftest_action.core.errors import InvalidURL, PullError, UnsupportedPullScheme
from conftest_action.core.models import PullTarget


GCS_CREDENTIALS_FILE = "gcs.json"
GCS_CREDENTIALS_ENV = "GOOGLE_APPLICATION_CREDENTIALS"


def compose_pull_url(pull_url: str, pull_secret: str, credentials_dir: str = ".") -> PullTarget | None:
    """Combine a pull URL with its secret into something `conftest pull` accepts.

    Args:
        pull_url (str): go-getter style URL, e.g. "s3::https://bucket/policy".
        pull_secret (str): Scheme-specific credential (GCS JSON key, S3 query
            string, or "user:pass" for plain HTTPS).
        credentials_dir (str): Directory for the GCS credentials file.

    Returns:
        PullTarget | None: None when no pull is configured, else the URL and
            any environment the pull subprocess needs.

    Notes:
        The GCS key is handed to conftest through the subprocess environment
        rather than the process-wide one.
    """
    if not pull_url:
        return None

    segments = pull_url.split("/")
    if len(segments) == 1:
        raise InvalidURL(f"invalid url: {pull_url}")

    if not pull_secret:
        return PullTarget(url=pull_url)

    scheme = segments[0]
    if scheme == "gcs::https:":
        path = _write_gcs_credentials(pull_secret, Path(credentials_dir))
        return PullTarget(url=pull_url, env={GCS_CREDENTIALS_ENV: str(path)}, credentials_file=str(path))
    if scheme == "s3::https:":
        return PullTarget(url=f"{pull_url}?{pull_secret}")
    if scheme == "https:":
        return PullTarget(url=_with_userinfo(pull_url, pull_secret))
    raise UnsupportedPullScheme(f"PULL_SECRET not supported with uri: {scheme}")


def _write_gcs_credentials(secret: str, directory: Path) -> Path:
    path = (directory / GCS_CREDENTIALS_FILE).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(secret)
        path.chmod(0o600)
    except OSError as exc:
        raise PullError(f"writing gcs creds: {exc}") from exc
    return path


def _with_userinfo(url: str, userinfo: str) -> str:
    parts = urlsplit(url)
    host = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit((parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, parts.fragment))


def remove_credentials(target: PullTarget) -> None:
    """Delete the credentials file written for a pull, if any."""
    if target.credentials_file:
        Path(target.credentials_file).unlink(missing_ok=True)
