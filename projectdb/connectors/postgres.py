"""PostgreSQL database connector"""

import psycopg2
from psycopg2.extras import RealDictCursor

from .base import DatabaseConnector


class PostgreSQLConnector(DatabaseConnector):
    """PostgreSQL database connector implementation"""

    DIALECT = "postgres"
    QUOTE_CHAR = '"'
    DEFAULT_PORT = 5432

    def _open(self):
        """Establish PostgreSQL connection"""
        params = self.params
        connection = psycopg2.connect(
            host=params.host,
            port=params.port or self.DEFAULT_PORT,
            dbname=params.database,
            user=params.username,
            password=params.password or "",
            connect_timeout=params.connect_timeout,
            options=f"-c statement_timeout={params.statement_timeout * 1000}",
            cursor_factory=RealDictCursor,
        )
        # A failed catalog query must not abort the statements that follow it.
        connection.autocommit = True
        return connection

    def _list_tables_query(self) -> str:
        return """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = current_schema()
            AND table_type = 'BASE TABLE'
            ORDER BY table_name
        """

    def _columns_query(self) -> str:
        return """
            SELECT column_name
            FROM information_schema.columns
            WHERE table_catalog = %s
            AND table_schema = current_schema()
            AND table_name = %s
            ORDER BY ordinal_position
        """

    def _primary_key_query(self) -> str:
        return """
            SELECT kcu.column_name
            FROM information_schema.table_constraints AS tc
            JOIN information_schema.key_column_usage AS kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
            WHERE tc.table_catalog = %s
            AND tc.table_schema = current_schema()
            AND tc.table_name = %s
            AND tc.constraint_type = 'PRIMARY KEY'
            ORDER BY kcu.ordinal_position
            LIMIT 1
        """

    def _foreign_keys_query(self) -> str:
        # Composite keys pair each local column with the referenced column at
        # the same position in the unique constraint.
        return """
            SELECT
                kcu.column_name,
                ref.table_name AS referenced_table,
                ref.column_name AS referenced_column
            FROM information_schema.table_constraints AS tc
            JOIN information_schema.key_column_usage AS kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.constraint_schema = kcu.constraint_schema
                AND tc.table_name = kcu.table_name
            JOIN information_schema.referential_constraints AS rc
                ON rc.constraint_name = tc.constraint_name
                AND rc.constraint_schema = tc.constraint_schema
            JOIN information_schema.key_column_usage AS ref
                ON ref.constraint_name = rc.unique_constraint_name
                AND ref.constraint_schema = rc.unique_constraint_schema
                AND ref.ordinal_position = kcu.position_in_unique_constraint
            WHERE tc.table_catalog = %s
            AND tc.table_schema = current_schema()
            AND tc.table_name = %s
            AND tc.constraint_type = 'FOREIGN KEY'
            ORDER BY kcu.ordinal_position
        """
