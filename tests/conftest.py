"""Shared fixtures: an in-memory tabular store speaking the Action API."""

import itertools
import json
import re
import threading
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote

import pytest

from store_records_api.app.clients.record_service import RecordServiceClient
from store_records_api.app.core.config import Settings
from store_records_api.app.schemas.store import CHILD_KEY, CHILD_TABLES, STORE_KEY, STORE_TABLE
from store_records_api.app.services.store_service import StoreService

APP_ID = "app-123"
ACCESS_KEY = "secret-access-key"
BASE_URL = "https://tabular.test/api/v2"

_SELECTOR = re.compile(r'^Filter\((\w+), \[(\w+)\] = "((?:[^"]|"")*)"\)$')


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")

    def json(self) -> Any:
        return json.loads(self.text)


class FakeTabularStore:
    """Stand-in for ``requests.Session`` backed by in-memory tables.

    Understands Find (with or without an equality ``Filter`` selector),
    Add, Edit and Delete.  ``fail(table, action, status)`` makes every
    matching call answer with that status.  Every call is recorded in
    ``calls`` as ``(table, action, body)``.
    """

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {t: [] for t in (STORE_TABLE,) + CHILD_TABLES}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.headers: List[Dict[str, str]] = []
        self.failures: Dict[Tuple[str, str], int] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    # -- test helpers ---------------------------------------------------
    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        stored = [self._with_key(table, row) for row in rows]
        self.tables[table].extend(stored)
        return stored

    def fail(self, table: str, action: str, status: int = 500) -> None:
        self.failures[(table, action)] = status

    def rows(self, table: str, **where: Any) -> List[Dict[str, Any]]:
        return [row for row in self.tables[table] if all(row.get(k) == v for k, v in where.items())]

    def actions(self) -> List[Tuple[str, str]]:
        return [(table, action) for table, action, _ in self.calls]

    # -- requests.Session interface -------------------------------------
    def request(self, method: str, url: str, json: Any = None, headers: Any = None, timeout: Any = None):
        table = unquote(url.split("/tables/")[1].split("/")[0])
        action = json["Action"]
        with self._lock:
            self.calls.append((table, action, json))
            self.headers.append(dict(headers or {}))
            if (headers or {}).get("ApplicationAccessKey") != ACCESS_KEY:
                return FakeResponse(403, {"detail": "Invalid access key"})
            if (table, action) in self.failures:
                return FakeResponse(self.failures[(table, action)], {"detail": f"{action} rejected"})
            if table not in self.tables:
                return FakeResponse(404, {"detail": f"Table {table} not found"})
            handler = getattr(self, f"_{action.lower()}")
            return FakeResponse(200, handler(table, json))

    # -- actions ----------------------------------------------------------
    def _find(self, table: str, body: Dict[str, Any]) -> List[Dict[str, Any]]:
        selector = body.get("Selector")
        if not selector:
            return [dict(row) for row in self.tables[table]]
        match = _SELECTOR.match(selector)
        assert match, f"unsupported selector {selector!r}"
        _, column, value = match.groups()
        value = value.replace('""', '"')
        return [dict(row) for row in self.tables[table] if str(row.get(column)) == value]

    def _add(self, table: str, body: Dict[str, Any]) -> List[Dict[str, Any]]:
        added = [self._with_key(table, row) for row in body["Rows"]]
        self.tables[table].extend(added)
        return [dict(row) for row in added]

    def _edit(self, table: str, body: Dict[str, Any]) -> List[Dict[str, Any]]:
        key = _key_column(table)
        updated = []
        for change in body["Rows"]:
            for row in self.tables[table]:
                if row.get(key) == change.get(key):
                    row.update(change)
                    updated.append(dict(row))
        return updated

    def _delete(self, table: str, body: Dict[str, Any]) -> List[Dict[str, Any]]:
        key = _key_column(table)
        doomed = {row[key] for row in body["Rows"]}
        deleted = [row for row in self.tables[table] if row.get(key) in doomed]
        self.tables[table] = [row for row in self.tables[table] if row.get(key) not in doomed]
        return deleted

    def _with_key(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        key = _key_column(table)
        if stored.get(key) in (None, ""):
            stored[key] = f"{table[:3].upper()}{next(self._ids)}"
        return stored


class ScriptedSession:
    """Session returning canned responses in order, recording requests."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def request(self, **kwargs: Any):
        self.requests.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _key_column(table: str) -> str:
    return STORE_KEY if table == STORE_TABLE else CHILD_KEY


def make_settings(**overrides: Any) -> Settings:
    values = dict(
        app_id=APP_ID,
        access_key=ACCESS_KEY,
        base_url=BASE_URL,
        locale="ja-JP",
        timezone="",
        api_token="",
        log_level="INFO",
        log_file="",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def tabular_store() -> FakeTabularStore:
    return FakeTabularStore()


@pytest.fixture
def client(tabular_store: FakeTabularStore) -> RecordServiceClient:
    return RecordServiceClient.from_settings(make_settings(), session=tabular_store)


@pytest.fixture
def service(client: RecordServiceClient) -> StoreService:
    return StoreService(client)


@pytest.fixture
def store_a(tabular_store: FakeTabularStore) -> Dict[str, Any]:
    return tabular_store.seed(
        STORE_TABLE,
        {
            "StoreID": "S1",
            "StoreName": "Store A",
            "CompanyName": "Acme",
            "TeamName": "North",
            "Interviewer": "Sato",
        },
    )[0]
