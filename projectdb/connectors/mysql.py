"""MySQL database connector"""

import pymysql
import pymysql.cursors

from .base import DatabaseConnector
from .errors import ConnectionFailure, sanitize_exception


class MySQLConnector(DatabaseConnector):
    """MySQL / MariaDB connector implementation"""

    DIALECT = "mysql"
    QUOTE_CHAR = "`"
    DEFAULT_PORT = 3306

    def _open(self):
        """Establish MySQL connection and bound statement time on the server"""
        params = self.params
        connection = pymysql.connect(
            host=params.host,
            port=params.port or self.DEFAULT_PORT,
            user=params.username,
            password=params.password or "",
            database=params.database,
            charset=params.charset,
            connect_timeout=params.connect_timeout,
            read_timeout=params.statement_timeout,
            write_timeout=params.statement_timeout,
            autocommit=True,
            cursorclass=pymysql.cursors.DictCursor,
        )
        try:
            with connection.cursor() as cursor:
                cursor.execute(self._session_timeout_statement(connection.get_server_info()))
        except pymysql.MySQLError:
            connection.close()
            raise
        return connection

    def _session_timeout_statement(self, server_info: str) -> str:
        """Statement that caps query time for this session"""
        # MariaDB counts in seconds, MySQL in milliseconds.
        if "mariadb" in (server_info or "").lower():
            return f"SET SESSION max_statement_time = {self.params.statement_timeout}"
        return f"SET SESSION max_execution_time = {self.params.statement_timeout * 1000}"

    def ping(self) -> None:
        """Open the connection and check the server still answers"""
        self.connect()
        try:
            self.connection.ping(reconnect=False)
        except pymysql.MySQLError as e:
            raise ConnectionFailure(sanitize_exception(e)) from e

    def _list_tables_query(self) -> str:
        return "SHOW TABLES"

    def _columns_query(self) -> str:
        return """
            SELECT COLUMN_NAME AS column_name
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA = %s
            AND TABLE_NAME = %s
            ORDER BY ORDINAL_POSITION
        """

    def _primary_key_query(self) -> str:
        return """
            SELECT COLUMN_NAME AS column_name
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE
            WHERE TABLE_SCHEMA = %s
            AND TABLE_NAME = %s
            AND CONSTRAINT_NAME = 'PRIMARY'
            ORDER BY ORDINAL_POSITION
            LIMIT 1
        """

    def _foreign_keys_query(self) -> str:
        return """
            SELECT
                COLUMN_NAME AS column_name,
                REFERENCED_TABLE_NAME AS referenced_table,
                REFERENCED_COLUMN_NAME AS referenced_column
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE
            WHERE TABLE_SCHEMA = %s
            AND TABLE_NAME = %s
            AND REFERENCED_TABLE_NAME IS NOT NULL
        """
