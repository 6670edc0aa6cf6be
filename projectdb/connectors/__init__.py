"""Database connectors module"""

from .base import ConnectionParams, ConnectionTestResult, DatabaseConnector, ForeignKey, TableSchema
from .errors import (
    ConnectionFailure,
    IntrospectionError,
    ProjectDatabaseError,
    QueryFailure,
    sanitize_error_message,
)
from .mysql import MySQLConnector
from .postgres import PostgreSQLConnector
from .registry import ConnectionRegistry, create_connector

__all__ = [
    "ConnectionParams",
    "ConnectionTestResult",
    "DatabaseConnector",
    "ForeignKey",
    "TableSchema",
    "ConnectionFailure",
    "IntrospectionError",
    "ProjectDatabaseError",
    "QueryFailure",
    "sanitize_error_message",
    "MySQLConnector",
    "PostgreSQLConnector",
    "ConnectionRegistry",
    "create_connector",
]
