"""Record service client.

This module wraps the row-oriented Action API of the external tabular
store.  Every table exposes a single endpoint::

    POST {base_url}/apps/{app_id}/tables/{table}/Action

and every operation is the same JSON envelope with a different
``Action`` discriminator::

    {"Action": "Find" | "Add" | "Edit" | "Delete",
     "Properties": {...},
     "Rows": [...],
     "Selector": "Filter(Table, [Column] = \\"value\\")"}

The client exposes one method per action:

* :meth:`RecordServiceClient.find` – rows matching a selector expression.
* :meth:`RecordServiceClient.add` – insert rows; keys are assigned remotely.
* :meth:`RecordServiceClient.edit` – update rows identified by their key.
* :meth:`RecordServiceClient.delete` – delete rows given only their key.

Any non-success status is fatal for that call and raised as
:class:`RemoteCallFailed`; nothing is retried, and ``add`` in particular
is not idempotent.

For the read path the client can also build :class:`RequestDescriptor`
objects without sending them (:meth:`build_batch_request`) and execute a
list of them concurrently with :meth:`fetch_all`.  Batch execution never
raises for a remote failure; each :class:`BatchResponse` reports its own
outcome so the caller decides how to treat a partial failure.

The access key is sent in the ``ApplicationAccessKey`` header and is
never written to the log.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote

import requests

from ..core.config import Settings
from ..core.errors import RemoteCallFailed


logger = logging.getLogger(__name__)

Record = Dict[str, Any]

ACTION_FIND = "Find"
ACTION_ADD = "Add"
ACTION_EDIT = "Edit"
ACTION_DELETE = "Delete"

# Actions that write user-entered values and therefore need locale hints.
_LOCALIZED_ACTIONS = {ACTION_ADD, ACTION_EDIT}

_MAX_DETAIL_LENGTH = 500


def filter_selector(table: str, column: str, value: Any) -> str:
    """Build an equality ``Filter`` selector expression.

    Double quotes inside ``value`` are doubled, which is how the
    expression language escapes them inside a string literal.
    """
    literal = str(value).replace('"', '""')
    return f'Filter({table}, [{column}] = "{literal}")'


@dataclass(frozen=True)
class RequestDescriptor:
    """A fully prepared request that has not been sent yet.

    Attributes:
        table: Name of the target table.
        action: Action discriminator carried in the body.
        url: Absolute URL of the table's Action endpoint.
        headers: Request headers, including the access key.
        body: JSON body (the Action envelope).
        method: HTTP method; the Action API only uses ``POST``.
    """

    table: str
    action: str
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]
    method: str = "POST"


@dataclass
class BatchResponse:
    """Outcome of one descriptor executed by :meth:`RecordServiceClient.fetch_all`."""

    table: str
    action: str
    status_code: Optional[int]
    ok: bool
    rows: List[Record] = field(default_factory=list)
    detail: str = ""

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise RemoteCallFailed(self.table, self.action, self.status_code, self.detail)


class RecordServiceClient:
    """Client for the Action API of the external tabular store."""

    def __init__(
        self,
        *,
        app_id: str,
        access_key: str,
        base_url: str = "https://api.appsheet.com/api/v2",
        locale: str = "ja-JP",
        timezone: str = "",
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None,
    ) -> None:
        """Initialise the client.

        Args:
            app_id: Identifier of the application owning the tables.
            access_key: Application access key sent with every request.
            base_url: API root, without trailing slash.
            locale: Value of the ``Locale`` property sent with Add and Edit.
            timezone: Optional ``Timezone`` property sent with Add and Edit.
            timeout: Transport timeout in seconds for each request.
            session: Optional requests session used for single calls.  One is
                created if omitted.
            session_factory: Builds the session each batch worker uses, since
                a requests session is not safe to share between threads.
                Defaults to ``requests.Session`` unless ``session`` was given,
                in which case batches reuse that session.
        """
        self.app_id = app_id
        self.access_key = access_key
        self.base_url = base_url.rstrip("/")
        self.locale = locale
        self.timezone = timezone
        self.timeout = timeout
        if session_factory is None and session is None:
            session_factory = requests.Session
        self.session = session or requests.Session()
        self.session_factory = session_factory

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: Optional[requests.Session] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None,
    ) -> "RecordServiceClient":
        return cls(
            app_id=settings.app_id,
            access_key=settings.access_key,
            base_url=settings.base_url,
            locale=settings.locale,
            timezone=settings.timezone,
            timeout=settings.request_timeout,
            session=session,
            session_factory=session_factory,
        )

    # ------------------------------------------------------------------
    # Table operations
    # ------------------------------------------------------------------
    def find(self, table: str, selector: Optional[str] = None) -> List[Record]:
        """Return the rows of ``table`` matching ``selector`` (all rows if omitted)."""
        return self._execute(table, self.build_payload(ACTION_FIND, selector=selector))

    def add(self, table: str, records: Sequence[Record]) -> List[Record]:
        """Insert ``records`` and return them as stored, with assigned keys."""
        return self._execute(table, self.build_payload(ACTION_ADD, rows=records))

    def edit(self, table: str, records: Sequence[Record]) -> Record:
        """Update ``records``; each one must carry the table's key column."""
        rows = self._execute(table, self.build_payload(ACTION_EDIT, rows=records))
        return rows[0] if rows else {}

    def delete(self, table: str, key_records: Sequence[Record]) -> Record:
        """Delete the rows identified by ``key_records`` (key columns only)."""
        rows = self._execute(table, self.build_payload(ACTION_DELETE, rows=key_records))
        return rows[0] if rows else {}

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------
    def table_url(self, table: str) -> str:
        return f"{self.base_url}/apps/{quote(self.app_id, safe='')}/tables/{quote(table, safe='')}/Action"

    def build_payload(
        self,
        action: str,
        *,
        rows: Optional[Iterable[Record]] = None,
        selector: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build the Action envelope for ``action``."""
        properties: Dict[str, str] = {}
        if action in _LOCALIZED_ACTIONS:
            properties["Locale"] = self.locale
            if self.timezone:
                properties["Timezone"] = self.timezone
        payload: Dict[str, Any] = {
            "Action": action,
            "Properties": properties,
            "Rows": [dict(row) for row in rows] if rows is not None else [],
        }
        if selector:
            payload["Selector"] = selector
        return payload

    def build_batch_request(self, table: str, payload: Dict[str, Any]) -> RequestDescriptor:
        """Return a descriptor for ``payload`` against ``table`` without sending it."""
        return RequestDescriptor(
            table=table,
            action=str(payload.get("Action", "")),
            url=self.table_url(table),
            headers=self._headers(),
            body=payload,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "ApplicationAccessKey": self.access_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def fetch_all(self, descriptors: Sequence[RequestDescriptor]) -> List[BatchResponse]:
        """Send all ``descriptors`` concurrently and wait for every one of them.

        Each worker sends through its own session from ``session_factory``.

        Responses are returned in the order of ``descriptors``.  A remote
        failure does not cancel the other requests.
        """
        if not descriptors:
            return []
        logger.debug(
            "Dispatching batch of %d requests: %s",
            len(descriptors),
            ", ".join(f"{d.action} {d.table}" for d in descriptors),
        )
        with ThreadPoolExecutor(max_workers=len(descriptors)) as executor:
            return list(executor.map(self._fetch_one, descriptors))

    def _fetch_one(self, descriptor: RequestDescriptor) -> BatchResponse:
        if self.session_factory is None:
            return self._collect(descriptor, self.session)
        with self.session_factory() as session:
            return self._collect(descriptor, session)

    def _collect(self, descriptor: RequestDescriptor, session: requests.Session) -> BatchResponse:
        try:
            response = self._send(descriptor, session)
        except requests.RequestException as exc:
            logger.error("%s on %s failed: %s", descriptor.action, descriptor.table, exc)
            return BatchResponse(
                table=descriptor.table,
                action=descriptor.action,
                status_code=None,
                ok=False,
                detail=str(exc),
            )
        if not _is_success(response.status_code):
            detail = _error_detail(response)
            logger.error(
                "%s on %s failed (%s): %s",
                descriptor.action,
                descriptor.table,
                response.status_code,
                detail,
            )
            return BatchResponse(
                table=descriptor.table,
                action=descriptor.action,
                status_code=response.status_code,
                ok=False,
                detail=detail,
            )
        try:
            rows = _parse_rows(response)
        except ValueError as exc:
            return BatchResponse(
                table=descriptor.table,
                action=descriptor.action,
                status_code=response.status_code,
                ok=False,
                detail=f"Invalid JSON response: {exc}",
            )
        return BatchResponse(
            table=descriptor.table,
            action=descriptor.action,
            status_code=response.status_code,
            ok=True,
            rows=rows,
        )

    def _execute(self, table: str, payload: Dict[str, Any]) -> List[Record]:
        descriptor = self.build_batch_request(table, payload)
        try:
            response = self._send(descriptor, self.session)
        except requests.RequestException as exc:
            logger.error("%s on %s failed: %s", descriptor.action, table, exc)
            raise RemoteCallFailed(table, descriptor.action, None, str(exc)) from exc
        if not _is_success(response.status_code):
            detail = _error_detail(response)
            logger.error("%s on %s failed (%s): %s", descriptor.action, table, response.status_code, detail)
            raise RemoteCallFailed(table, descriptor.action, response.status_code, detail)
        try:
            return _parse_rows(response)
        except ValueError as exc:
            raise RemoteCallFailed(
                table, descriptor.action, response.status_code, f"Invalid JSON response: {exc}"
            ) from exc

    def _send(self, descriptor: RequestDescriptor, session: requests.Session) -> requests.Response:
        logger.debug(
            "Sending %s to %s (%d rows)",
            descriptor.action,
            descriptor.table,
            len(descriptor.body.get("Rows", [])),
        )
        return session.request(
            method=descriptor.method,
            url=descriptor.url,
            json=descriptor.body,
            headers=descriptor.headers,
            timeout=self.timeout,
        )


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _parse_rows(response: requests.Response) -> List[Record]:
    """Extract the row list from a successful response.

    An empty body means no rows.  The API usually answers with a bare
    list but some deployments wrap it as ``{"Rows": [...]}``.
    """
    if not response.content or not response.content.strip():
        return []
    data = response.json()
    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    if isinstance(data, dict):
        rows = data.get("Rows")
        if isinstance(rows, list):
            return [row for row in rows if isinstance(row, dict)]
    return []


def _error_detail(response: requests.Response) -> str:
    message = ""
    try:
        err_json = response.json()
    except ValueError:
        err_json = None
    if isinstance(err_json, dict):
        message = str(
            err_json.get("detail")
            or err_json.get("Message")
            or err_json.get("message")
            or err_json.get("title")
            or json.dumps(err_json, ensure_ascii=False)
        )
    elif err_json is not None:
        message = json.dumps(err_json, ensure_ascii=False)
    if not message:
        message = response.text or ""
    return message[:_MAX_DETAIL_LENGTH]
