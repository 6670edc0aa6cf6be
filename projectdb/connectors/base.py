"""Base database connector interface"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from .errors import ConnectionFailure, IntrospectionError, QueryFailure, sanitize_exception


@dataclass(frozen=True)
class ConnectionParams:
    """Everything needed to open one project's connection"""
    name: str
    host: str
    port: Optional[int]
    database: str
    username: str
    password: str = field(default="", repr=False)
    connect_timeout: int = 5
    statement_timeout: int = 30
    charset: str = "utf8mb4"


@dataclass(frozen=True)
class ForeignKey:
    """Target of a declared or inferred foreign key"""
    table: str
    column: str

    def to_dict(self) -> Dict[str, str]:
        return {"table": self.table, "column": self.column}


@dataclass
class TableSchema:
    """Represents a database table schema"""
    name: str
    columns: List[str]
    primary_key: str
    foreign_keys: Dict[str, ForeignKey] = field(default_factory=dict)
    inferred: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "name": self.name,
            "columns": list(self.columns),
            "primary_key": self.primary_key,
            "foreign_keys": {
                column: fk.to_dict() for column, fk in self.foreign_keys.items()
            },
            "inferred": self.inferred,
        }


@dataclass(frozen=True)
class ConnectionTestResult:
    """Outcome of a connection liveness probe"""
    connected: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"connected": self.connected, "error": self.error}


class DatabaseConnector(ABC):
    """
    Abstract base class for database connectors

    A connector is bound to exactly one project's connection parameters. The
    socket is opened lazily on the first query, or explicitly with ``ping``.
    """

    DIALECT = ""
    QUOTE_CHAR = '"'

    def __init__(self, params: ConnectionParams):
        self.params = params
        self.connection = None

    @property
    def name(self) -> str:
        return self.params.name

    @property
    def database(self) -> str:
        return self.params.database

    @property
    def is_open(self) -> bool:
        return self.connection is not None

    @abstractmethod
    def _open(self) -> Any:
        """Open and return a DB-API connection"""
        pass

    @abstractmethod
    def _list_tables_query(self) -> str:
        pass

    @abstractmethod
    def _columns_query(self) -> str:
        """Query returning ``column_name`` rows in declared order"""
        pass

    @abstractmethod
    def _primary_key_query(self) -> str:
        """Query returning the ``column_name`` of the table's primary key"""
        pass

    @abstractmethod
    def _foreign_keys_query(self) -> str:
        """Query returning ``column_name``, ``referenced_table``, ``referenced_column``"""
        pass

    def connect(self) -> None:
        """Establish the connection"""
        if self.connection is not None:
            return
        try:
            self.connection = self._open()
        except Exception as e:
            logger.debug(f"Raw connect error for {self.name}: {e}")
            message = sanitize_exception(e)
            logger.warning(f"Failed to connect {self.DIALECT} connection {self.name}: {message}")
            raise ConnectionFailure(message) from e
        logger.info(f"Opened {self.DIALECT} connection {self.name}")

    def disconnect(self) -> None:
        """Close the connection"""
        if self.connection is None:
            return
        try:
            self.connection.close()
        except Exception as e:
            logger.warning(f"Error closing connection {self.name}: {type(e).__name__}")
        finally:
            self.connection = None
        logger.info(f"{self.DIALECT} connection {self.name} closed")

    def ping(self) -> None:
        """Open the socket and complete the handshake without touching any table"""
        self.connect()

    def quote_identifier(self, identifier: str) -> str:
        """Quote a table or column name for this dialect"""
        q = self.QUOTE_CHAR
        # Statements always go through parameter formatting, so a literal
        # percent sign has to be doubled.
        escaped = identifier.replace(q, q + q).replace("%", "%%")
        return q + escaped + q

    def get_tables(self) -> List[str]:
        """Get list of all tables in the database"""
        rows = self.execute_query(self._list_tables_query())
        return [str(list(row.values())[0]) for row in rows]

    def get_columns(self, table_name: str) -> List[str]:
        """Get column names for a table in declared order"""
        rows = self.execute_query(self._columns_query(), (self.database, table_name))
        return [row["column_name"] for row in rows]

    def get_row_count(self, table_name: str) -> int:
        """Get total row count for a table"""
        query = f"SELECT COUNT(*) AS row_count FROM {self.quote_identifier(table_name)}"
        rows = self.execute_query(query)
        return int(rows[0]["row_count"]) if rows else 0

    def get_primary_key(self, table_name: str) -> Optional[str]:
        """
        Get the primary key column for a table

        Returns:
            First primary key column, or None when the table declares none

        Raises:
            IntrospectionError: The catalog could not be queried
        """
        rows = self._catalog_query(self._primary_key_query(), (self.database, table_name))
        return rows[0]["column_name"] if rows else None

    def get_foreign_keys(self, table_name: str) -> Dict[str, ForeignKey]:
        """
        Get declared foreign key constraints for a table

        Raises:
            IntrospectionError: The catalog could not be queried
        """
        rows = self._catalog_query(self._foreign_keys_query(), (self.database, table_name))
        return {
            row["column_name"]: ForeignKey(
                table=row["referenced_table"],
                column=row["referenced_column"],
            )
            for row in rows
            if row.get("referenced_table")
        }

    def fetch_rows(
        self,
        table_name: str,
        limit: int,
        offset: int,
        order_by: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch a window of rows, newest first when ``order_by`` is given"""
        query = f"SELECT * FROM {self.quote_identifier(table_name)}"
        if order_by:
            query += f" ORDER BY {self.quote_identifier(order_by)} DESC"
        query += " LIMIT %s OFFSET %s"
        return self.execute_query(query, (limit, offset))

    def fetch_one(self, table_name: str, column: str, value: Any) -> Optional[Dict[str, Any]]:
        """Fetch the first row where ``column`` equals ``value``"""
        query = (
            f"SELECT * FROM {self.quote_identifier(table_name)} "
            f"WHERE {self.quote_identifier(column)} = %s LIMIT 1"
        )
        rows = self.execute_query(query, (value,))
        return rows[0] if rows else None

    def execute_query(self, query: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        """
        Execute a read query and return its rows as dictionaries

        Raises:
            ConnectionFailure: The connection could not be opened
            QueryFailure: The statement failed
        """
        self.connect()
        try:
            return self._fetch_all(query, params)
        except Exception as e:
            logger.debug(f"Raw query error on {self.name}: {e}")
            message = sanitize_exception(e)
            logger.error(f"Query failed on {self.name}: {message}")
            raise QueryFailure(message) from e

    def _catalog_query(self, query: str, params: tuple) -> List[Dict[str, Any]]:
        try:
            return self.execute_query(query, params)
        except QueryFailure as e:
            raise IntrospectionError(e.message) from e

    def _fetch_all(self, query: str, params: Optional[tuple]) -> List[Dict[str, Any]]:
        with self.connection.cursor() as cursor:
            cursor.execute(query, params or ())
            return [dict(row) for row in cursor.fetchall()]

    def __enter__(self):
        """Context manager entry"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.disconnect()
