from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional
import logging
import os

import requests
from requests import Response, Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)


def _build_retry(total: int = 1, backoff_factor: float = 0.5) -> Retry:
    """
    Exponential backoff via urllib3 Retry.
    Retries connect errors and common transient HTTP statuses + 429. POST is
    included because scoring requests have no side effects on the remote end.
    Read timeouts are not retried: the caller already waited a full timeout.
    """
    return Retry(
        total=total,
        read=0,
        connect=total,
        status=total,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"POST"}),
        raise_on_status=False,
        respect_retry_after_header=False,
    )


class HttpClient:
    """
    Small wrapper around requests.Session with sane defaults:
    - Retries + backoff
    - Per-request timeout
    - JSON helper that raises on non-2xx and undecodable bodies
    """

    def __init__(
        self,
        timeout: float = 10.0,
        max_retries: int = 1,
        user_agent: Optional[str] = None,
    ) -> None:
        self._timeout = timeout
        self._session = Session()

        adapter = HTTPAdapter(max_retries=_build_retry(total=max_retries))
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

        ua = user_agent or os.getenv("HTTP_USER_AGENT", "hackmatch/1.0")
        self._default_headers: dict[str, str] = {
            "User-Agent": ua,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    @property
    def session(self) -> Session:
        return self._session

    def post(
        self,
        url: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Response:
        merged: MutableMapping[str, str] = dict(self._default_headers)
        if headers:
            merged.update(headers)
        t = timeout or self._timeout
        return self._session.post(
            url, json=json, params=params, headers=merged, timeout=t
        )

    def post_json(
        self,
        url: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        resp = self.post(
            url, json=json, params=params, headers=headers, timeout=timeout
        )
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            logger.warning("HTTP error %s for %s", e, _redact(resp.url))
            raise

        try:
            return resp.json()
        except ValueError:
            logger.warning("Non-JSON response from %s", _redact(resp.url))
            raise


def _redact(url: str) -> str:
    # never log query strings: they can carry API keys
    return url.split("?", 1)[0] if url else url
