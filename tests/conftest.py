"""Shared fixtures: in-memory connectors and fake DB-API connections."""

from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from projectdb.config.project import Project
from projectdb.config.settings import Settings
from projectdb.connectors.base import ConnectionParams, DatabaseConnector, ForeignKey
from projectdb.connectors.errors import IntrospectionError
from projectdb.connectors.registry import ConnectionRegistry


class FakeConnector(DatabaseConnector):
    """Connector serving tables from memory and recording what was asked."""

    DIALECT = "fake"

    def __init__(
        self,
        tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        *,
        columns: Optional[Dict[str, List[str]]] = None,
        primary_keys: Optional[Dict[str, str]] = None,
        foreign_keys: Optional[Dict[str, Dict[str, ForeignKey]]] = None,
        fail_primary_key: bool = False,
        fail_foreign_keys: bool = False,
        params: Optional[ConnectionParams] = None,
    ) -> None:
        super().__init__(params or make_params("project_fake"))
        self.tables = tables or {}
        self.columns = columns or {}
        self.primary_keys = primary_keys or {}
        self.declared_foreign_keys = foreign_keys or {}
        self.fail_primary_key = fail_primary_key
        self.fail_foreign_keys = fail_foreign_keys
        self.calls: List[Tuple[Any, ...]] = []
        self.closed = False

    def _open(self) -> "FakeDbConnection":
        return FakeDbConnection()

    def disconnect(self) -> None:
        self.closed = True
        super().disconnect()

    def _list_tables_query(self) -> str:
        return ""

    def _columns_query(self) -> str:
        return ""

    def _primary_key_query(self) -> str:
        return ""

    def _foreign_keys_query(self) -> str:
        return ""

    def get_tables(self) -> List[str]:
        self.calls.append(("tables",))
        return list(self.tables)

    def get_columns(self, table_name: str) -> List[str]:
        self.calls.append(("columns", table_name))
        if table_name in self.columns:
            return list(self.columns[table_name])
        rows = self.tables.get(table_name) or []
        return list(rows[0]) if rows else []

    def get_row_count(self, table_name: str) -> int:
        self.calls.append(("count", table_name))
        return len(self.tables.get(table_name, []))

    def get_primary_key(self, table_name: str) -> Optional[str]:
        self.calls.append(("primary_key", table_name))
        if self.fail_primary_key:
            raise IntrospectionError("Database connection error")
        return self.primary_keys.get(table_name)

    def get_foreign_keys(self, table_name: str) -> Dict[str, ForeignKey]:
        self.calls.append(("foreign_keys", table_name))
        if self.fail_foreign_keys:
            raise IntrospectionError("Database connection error")
        return dict(self.declared_foreign_keys.get(table_name, {}))

    def fetch_rows(
        self,
        table_name: str,
        limit: int,
        offset: int,
        order_by: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        self.calls.append(("rows", table_name, limit, offset, order_by))
        rows = list(self.tables.get(table_name, []))
        if order_by:
            rows.sort(key=lambda row: row[order_by], reverse=True)
        return rows[offset:offset + limit]

    def fetch_one(self, table_name: str, column: str, value: Any) -> Optional[Dict[str, Any]]:
        self.calls.append(("one", table_name, column, value))
        for row in self.tables.get(table_name, []):
            if str(row.get(column)) == str(value):
                return row
        return None


class FakeCursor:
    def __init__(self, connection: "FakeDbConnection") -> None:
        self._connection = connection
        self._rows: List[Dict[str, Any]] = []

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def execute(self, query: str, params: Optional[tuple] = None) -> None:
        self._connection.executed.append((query, params))
        error = self._connection.error_for(query)
        if error is not None:
            raise error
        self._rows = list(self._connection.responder(query, params))

    def fetchall(self) -> List[Dict[str, Any]]:
        return self._rows


class FakeDbConnection:
    """Minimal DB-API connection; ``responder`` maps (query, params) to rows."""

    def __init__(
        self,
        responder: Optional[Callable[[str, Optional[tuple]], List[Dict[str, Any]]]] = None,
        *,
        errors: Optional[Dict[str, Exception]] = None,
        **kwargs: Any,
    ) -> None:
        self.responder = responder or (lambda _query, _params: [])
        self.errors = errors or {}
        self.kwargs = kwargs
        self.executed: List[Tuple[str, Optional[tuple]]] = []
        self.closed = False
        self.pinged = False
        self.autocommit = False
        self.server_info = "8.0.36"

    def error_for(self, query: str) -> Optional[Exception]:
        for fragment, error in self.errors.items():
            if fragment in query:
                return error
        return None

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def get_server_info(self) -> str:
        return self.server_info

    def ping(self, reconnect: bool = True) -> None:
        self.pinged = True

    def close(self) -> None:
        self.closed = True


def make_params(name: str = "project_1", **overrides: Any) -> ConnectionParams:
    values: Dict[str, Any] = {
        "name": name,
        "host": "db.internal",
        "port": None,
        "database": "shop",
        "username": "reader",
        "password": "s3cret",
    }
    values.update(overrides)
    return ConnectionParams(**values)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        default_per_page=15,
        max_per_page=100,
        connect_timeout=5,
        statement_timeout=30,
    )


@pytest.fixture
def project() -> Project:
    return Project(
        id=1,
        driver="mysql",
        host="db.internal",
        port=3306,
        database="shop",
        username="reader",
        password="s3cret",
    )


@pytest.fixture
def fake_registry(settings: Settings) -> Callable[[FakeConnector], ConnectionRegistry]:
    """Build a registry whose factory hands out the given fake connector."""

    def _build(connector: FakeConnector) -> ConnectionRegistry:
        def _factory(driver: str, params: ConnectionParams) -> DatabaseConnector:
            connector.params = params
            return connector

        return ConnectionRegistry(settings, connector_factory=_factory)

    return _build
