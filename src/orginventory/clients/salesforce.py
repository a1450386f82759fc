"""Salesforce REST client executing SOQL queries."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urljoin

import requests
from requests.exceptions import RequestException
from structlog.stdlib import BoundLogger

from orginventory.config.models import InventoryConfig
from orginventory.core.errors import QueryError
from orginventory.core.log_events import LogEvents
from orginventory.core.logger import UnifiedLogger

from .rate_limit import TokenBucketLimiter

__all__ = ["SalesforceClient"]


class SalesforceClient:
    """Execute SOQL through the REST ``query`` resource.

    Every page of a result set is fetched by following ``nextRecordsUrl``;
    record ``attributes`` metadata is stripped.  Transport failures, HTTP
    errors and undecodable payloads are raised as :class:`QueryError` so the
    retry policy above can treat them uniformly.  The client performs no
    retries of its own.

    Each thread issues requests through its own session built by
    ``session_factory``.  An injected ``session`` is shared by every thread.
    """

    def __init__(
        self,
        instance_url: str,
        access_token: str,
        *,
        api_version: str = "59.0",
        timeout_sec: float = 30.0,
        batch_size: int | None = None,
        session: requests.Session | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        rate_limiter: TokenBucketLimiter | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.instance_url = instance_url.rstrip("/")
        self.api_version = api_version
        self._timeout = timeout_sec
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        if batch_size is not None:
            self._headers["Sforce-Query-Options"] = f"batchSize={batch_size}"
        self._session_factory = (lambda: session) if session is not None else session_factory
        self._session_local = threading.local()
        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()
        self._get_session()
        self._rate_limiter = rate_limiter
        self._log = logger or UnifiedLogger.get(__name__).bind(component="clients.salesforce")

    @classmethod
    def from_config(
        cls,
        config: InventoryConfig,
        *,
        instance_url: str,
        access_token: str,
        api_version: str | None = None,
        session: requests.Session | None = None,
    ) -> SalesforceClient:
        rate_limit = config.security.rate_limit
        return cls(
            instance_url,
            access_token,
            api_version=api_version or config.connection.api_version,
            timeout_sec=config.connection.timeout_sec,
            batch_size=config.performance.batch_size,
            session=session,
            rate_limiter=TokenBucketLimiter(rate_limit.requests, rate_limit.window_sec),
        )

    @property
    def query_url(self) -> str:
        return f"{self.instance_url}/services/data/v{self.api_version}/query"

    def close(self) -> None:
        with self._sessions_lock:
            sessions = list(dict.fromkeys(self._sessions))
            self._sessions.clear()
        for session in sessions:
            session.close()

    def _get_session(self) -> requests.Session:
        """Return the session bound to the calling thread."""
        session = getattr(self._session_local, "session", None)
        if session is None:
            session = self._session_factory()
            session.headers.update(self._headers)
            self._session_local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def query(self, soql: str) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        url: str | None = self.query_url
        params: dict[str, str] | None = {"q": soql}
        page_index = 0

        while url:
            payload = self._get(url, params=params, soql=soql)
            page = payload.get("records") or []
            records.extend(_strip_attributes(record) for record in page)
            self._log.debug(
                LogEvents.HTTP_QUERY_PAGE,
                page_index=page_index,
                records=len(page),
                total_size=payload.get("totalSize"),
            )
            next_url = payload.get("nextRecordsUrl")
            url = urljoin(self.instance_url + "/", next_url) if next_url and not payload.get("done", True) else None
            params = None
            page_index += 1

        return records

    def _get(self, url: str, *, params: Mapping[str, str] | None, soql: str) -> Mapping[str, Any]:
        if self._rate_limiter is not None:
            waited = self._rate_limiter.acquire()
            if waited:
                self._log.debug(LogEvents.HTTP_RATE_LIMITER_WAIT, wait_seconds=waited)

        try:
            response = self._get_session().get(url, params=params, timeout=self._timeout)
        except RequestException as exc:
            self._log.warning(LogEvents.HTTP_QUERY_FAILED, soql=soql, error=str(exc))
            raise QueryError(f"Request failed: {exc}", soql=soql) from exc

        if response.status_code >= 400:
            message = _error_message(response)
            self._log.warning(
                LogEvents.HTTP_QUERY_FAILED,
                soql=soql,
                status_code=response.status_code,
                error=message,
            )
            raise QueryError(message, soql=soql, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise QueryError(f"Unable to decode JSON response from {url}", soql=soql) from exc
        if not isinstance(payload, Mapping):
            msg = f"Expected mapping payload from {url}, received {type(payload).__name__}"
            raise QueryError(msg, soql=soql)
        return payload


def _strip_attributes(record: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in record.items() if key != "attributes"}


def _error_message(response: requests.Response) -> str:
    """Extract ``errorCode: message`` pairs from a Salesforce error body."""

    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text[:200]}"
    if isinstance(body, list):
        parts = [
            f"{item.get('errorCode', 'ERROR')}: {item.get('message', '')}".strip()
            for item in body
            if isinstance(item, Mapping)
        ]
        if parts:
            return "; ".join(parts)
    return f"HTTP {response.status_code}"
