"""Project database service: schema and row access for one project"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from ..config.project import Project
from ..config.settings import Settings, get_settings
from ..connectors.base import ConnectionTestResult, DatabaseConnector, ForeignKey, TableSchema
from ..connectors.registry import ConnectionRegistry
from ..data.reader import Page, PaginatedReader
from ..data.values import Row, row_to_json
from ..schema.introspector import SchemaIntrospector


@dataclass(frozen=True)
class RecordLink:
    """A foreign key value resolved to the record it points at"""
    table: str
    column: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"table": self.table, "column": self.column, "value": self.value}


@dataclass
class RecordView:
    """A single record with everything needed to render its detail page"""
    table: str
    record_id: str
    record: Row
    columns: List[str]
    primary_key: str
    foreign_keys: Dict[str, ForeignKey] = field(default_factory=dict)
    links: Dict[str, RecordLink] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "table": self.table,
            "record_id": self.record_id,
            "record": row_to_json(self.record),
            "columns": list(self.columns),
            "primary_key": self.primary_key,
            "foreign_keys": {column: fk.to_dict() for column, fk in self.foreign_keys.items()},
            "links": {column: link.to_dict() for column, link in self.links.items()},
        }


class ProjectDatabaseService:
    """
    Browses one project's external database

    Connections come from a ``ConnectionRegistry``. When none is passed the
    service owns a private registry; either way ``disconnect`` (or leaving the
    ``with`` block) releases this project's connection.
    """

    def __init__(
        self,
        project: Project,
        registry: Optional[ConnectionRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.project = project
        self.settings = settings or get_settings()
        self.registry = registry or ConnectionRegistry(self.settings)

    def connect(self) -> Optional[DatabaseConnector]:
        """Connector for the project, or None when no database is configured"""
        return self.registry.connect(self.project)

    def disconnect(self) -> None:
        self.registry.disconnect(self.project)

    def test_connection(self) -> ConnectionTestResult:
        result = self.registry.test_connection(self.project)
        if result.connected:
            logger.info(f"Connection test succeeded for {self.project.connection_name}")
        else:
            logger.info(f"Connection test failed for {self.project.connection_name}: {result.error}")
        return result

    def get_tables(self) -> List[str]:
        return self._introspector().list_tables()

    def has_table(self, table: str) -> bool:
        return table in self.get_tables()

    def get_table_columns(self, table: str) -> List[str]:
        return self._introspector().list_columns(table)

    def get_table_row_count(self, table: str) -> int:
        return self._introspector().row_count(table)

    def get_primary_key(self, table: str) -> Optional[str]:
        return self._introspector().primary_key(table)

    def get_table_foreign_keys(self, table: str) -> Dict[str, ForeignKey]:
        return self._introspector().foreign_keys(table)

    def get_table_schema(self, table: str) -> Optional[TableSchema]:
        """Schema of a table, or None when no database is configured"""
        introspector = self._introspector()
        if introspector.connector is None:
            return None
        return introspector.table_schema(table)

    def get_table_data(self, table: str, per_page: Optional[int] = None, page: int = 1) -> Page:
        """Rows of a table in natural storage order"""
        return PaginatedReader(self.connect()).page(table, self._per_page(per_page), page)

    def get_table_row(self, table: str, column: str, value: Any) -> Optional[Row]:
        return PaginatedReader(self.connect()).get_one(table, column, value)

    def get_record(self, table: str, record_id: Any) -> Optional[RecordView]:
        """
        Look up a record by primary key and resolve its foreign key links

        Args:
            table: Table holding the record
            record_id: Primary key value

        Returns:
            RecordView, or None when there is no database or no such record
        """
        connector = self.connect()
        if connector is None:
            return None

        schema = self._introspector(connector).table_schema(table)
        primary_key = schema.primary_key
        record = PaginatedReader(connector).get_one(table, primary_key, record_id)
        if record is None:
            logger.debug(f"Record {record_id} not found in {table}")
            return None

        links = {
            column: RecordLink(table=fk.table, column=fk.column, value=record[column].to_json())
            for column, fk in schema.foreign_keys.items()
            if column in record and not record[column].is_null
        }
        return RecordView(
            table=table,
            record_id=str(record_id),
            record=record,
            columns=schema.columns or list(record),
            primary_key=primary_key,
            foreign_keys=schema.foreign_keys,
            links=links,
        )

    def get_users(self, per_page: Optional[int] = None, page: int = 1) -> Page:
        """Newest rows of the project's users table"""
        table = self.project.users_table or self.settings.default_users_table
        return self._newest_first(table, per_page, page)

    def get_feedbacks(self, per_page: Optional[int] = None, page: int = 1) -> Page:
        """Newest rows of the project's feedback table; empty when none is set"""
        if not self.project.feedbacks_table:
            return Page.empty(self._per_page(per_page), max(1, page))
        return self._newest_first(self.project.feedbacks_table, per_page, page)

    def get_pinned_tables(self) -> List[str]:
        """Pinned tables, in the user's order, that still exist"""
        if not self.project.pinned_tables:
            return []
        tables = set(self.get_tables())
        return [table for table in self.project.pinned_tables if table in tables]

    def _newest_first(self, table: str, per_page: Optional[int], page: int) -> Page:
        connector = self.connect()
        per_page = self._per_page(per_page)
        if connector is None:
            return Page.empty(per_page, max(1, page))

        order_by = self.settings.created_at_column
        if order_by not in self._introspector(connector).list_columns(table):
            order_by = None
        return PaginatedReader(connector).page(table, per_page, page, order_by=order_by)

    def _per_page(self, per_page: Optional[int]) -> int:
        if per_page is None:
            return self.settings.default_per_page
        return max(1, min(per_page, self.settings.max_per_page))

    def _introspector(self, connector: Optional[DatabaseConnector] = None) -> SchemaIntrospector:
        return SchemaIntrospector(connector or self.connect())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
