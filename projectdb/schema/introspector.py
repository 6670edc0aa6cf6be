"""Schema introspection against a project's live database"""

from typing import Dict, List, Optional

from loguru import logger

from ..connectors.base import DatabaseConnector, ForeignKey, TableSchema
from ..connectors.errors import IntrospectionError
from .inference import RelationshipInferrer


DEFAULT_PRIMARY_KEY = "id"


class SchemaIntrospector:
    """
    Reads table, column and key metadata from a connector

    Nothing is cached: the external schema may change between requests. With
    no connector every lookup returns an empty result.
    """

    def __init__(
        self,
        connector: Optional[DatabaseConnector],
        inferrer: Optional[RelationshipInferrer] = None,
    ):
        self.connector = connector
        self.inferrer = inferrer or RelationshipInferrer()

    def list_tables(self) -> List[str]:
        """Table names exactly as the database reports them"""
        if self.connector is None:
            return []
        return self.connector.get_tables()

    def list_columns(self, table_name: str) -> List[str]:
        """Column names in declared order"""
        if self.connector is None:
            return []
        return self.connector.get_columns(table_name)

    def row_count(self, table_name: str) -> int:
        if self.connector is None:
            return 0
        return self.connector.get_row_count(table_name)

    def primary_key(self, table_name: str) -> Optional[str]:
        """
        Primary key column of a table

        Falls back to ``id`` when the catalog cannot be read or the table
        declares no primary key. Returns None only when there is no connector.
        """
        if self.connector is None:
            return None
        try:
            column = self.connector.get_primary_key(table_name)
        except IntrospectionError as e:
            logger.warning(f"Primary key lookup failed for {table_name}: {e.message}")
            return DEFAULT_PRIMARY_KEY
        return column or DEFAULT_PRIMARY_KEY

    def foreign_keys(self, table_name: str) -> Dict[str, ForeignKey]:
        """Declared foreign keys, or inferred ones when none are declared"""
        foreign_keys, _ = self._resolve_foreign_keys(table_name)
        return foreign_keys

    def table_schema(self, table_name: str) -> TableSchema:
        """Columns, primary key and relationships of a table"""
        columns = self.list_columns(table_name)
        foreign_keys, inferred = self._resolve_foreign_keys(table_name, columns)
        return TableSchema(
            name=table_name,
            columns=columns,
            primary_key=self.primary_key(table_name) or DEFAULT_PRIMARY_KEY,
            foreign_keys=foreign_keys,
            inferred=inferred,
        )

    def _resolve_foreign_keys(self, table_name: str, columns: Optional[List[str]] = None):
        if self.connector is None:
            return {}, False

        try:
            declared = self.connector.get_foreign_keys(table_name)
        except IntrospectionError as e:
            logger.warning(f"Foreign key lookup failed for {table_name}: {e.message}")
            declared = {}

        if declared:
            return declared, False

        if columns is None:
            columns = self.list_columns(table_name)
        inferred = self.inferrer.infer(columns, self.list_tables())
        return inferred, True
