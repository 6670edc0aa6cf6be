"""Per-project connection registry owned by a request or operation scope"""

from threading import Lock
from typing import Callable, Dict, Optional, Type

from loguru import logger

from ..config.project import Project
from ..config.settings import Settings, get_settings
from .base import ConnectionParams, ConnectionTestResult, DatabaseConnector
from .errors import UNSUPPORTED_DRIVER_MESSAGE, ConnectionFailure, ProjectDatabaseError, sanitize_exception
from .mysql import MySQLConnector
from .postgres import PostgreSQLConnector


NO_DATABASE_MESSAGE = "No database configuration provided"

CONNECTOR_CLASSES: Dict[str, Type[DatabaseConnector]] = {
    "mysql": MySQLConnector,
    "mariadb": MySQLConnector,
    "pgsql": PostgreSQLConnector,
    "postgres": PostgreSQLConnector,
    "postgresql": PostgreSQLConnector,
}

ConnectorFactory = Callable[[str, ConnectionParams], DatabaseConnector]


def create_connector(driver: str, params: ConnectionParams) -> DatabaseConnector:
    """
    Build a connector for the given driver name

    Raises:
        ConnectionFailure: The driver is not supported
    """
    connector_class = CONNECTOR_CLASSES.get(driver.lower())
    if connector_class is None:
        logger.warning(f"Unsupported database driver for {params.name}: {driver}")
        raise ConnectionFailure(UNSUPPORTED_DRIVER_MESSAGE)
    return connector_class(params)


def build_connection_params(project: Project, settings: Settings) -> ConnectionParams:
    """Derive the named connection parameters for a project"""
    return ConnectionParams(
        name=project.connection_name,
        host=project.host,
        port=project.port,
        database=project.database,
        username=project.username,
        password=project.password or "",
        connect_timeout=settings.connect_timeout,
        statement_timeout=settings.statement_timeout,
        charset=settings.mysql_charset,
    )


class ConnectionRegistry:
    """
    Maps connection names (``project_<id>``) to live connectors

    A registry belongs to one request or operation; it is not shared
    process-wide. Closing it releases every connection it opened.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        connector_factory: Optional[ConnectorFactory] = None,
    ):
        self.settings = settings or get_settings()
        self.connector_factory = connector_factory or create_connector
        self._handles: Dict[str, DatabaseConnector] = {}
        self._lock = Lock()

    def connect(self, project: Project) -> Optional[DatabaseConnector]:
        """
        Get the connector for a project, registering it on first use

        Args:
            project: Project whose database to connect to

        Returns:
            Connector, or None when the project has no complete descriptor

        Raises:
            ConnectionFailure: The project's driver is not supported
        """
        if not project.has_database():
            return None

        driver = project.driver.strip()
        params = build_connection_params(project, self.settings)

        with self._lock:
            existing = self._handles.get(params.name)
            if existing is not None:
                if existing.params == params:
                    return existing
                logger.info(f"Connection settings changed for {params.name}, replacing handle")
                existing.disconnect()

            connector = self.connector_factory(driver, params)
            self._handles[params.name] = connector
            logger.debug(f"Registered connection {params.name} ({driver})")
            return connector

    def disconnect(self, project: Project) -> None:
        """Release a project's connection; no-op if none was registered"""
        with self._lock:
            connector = self._handles.pop(project.connection_name, None)
        if connector is not None:
            connector.disconnect()
            logger.debug(f"Purged connection {project.connection_name}")

    def test_connection(self, project: Project) -> ConnectionTestResult:
        """Connect and probe liveness, returning a sanitized error on failure"""
        try:
            connector = self.connect(project)
            if connector is None:
                return ConnectionTestResult(connected=False, error=NO_DATABASE_MESSAGE)
            connector.ping()
            return ConnectionTestResult(connected=True)
        except ProjectDatabaseError as e:
            return ConnectionTestResult(connected=False, error=e.message)
        except Exception as e:
            logger.debug(f"Raw connection test error for {project.connection_name}: {e}")
            return ConnectionTestResult(connected=False, error=sanitize_exception(e))

    def get(self, name: str) -> Optional[DatabaseConnector]:
        """Get a registered connector by connection name"""
        return self._handles.get(name)

    @property
    def names(self):
        return sorted(self._handles)

    def close_all(self) -> None:
        """Close every connection held by the registry"""
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()
        for connector in handles:
            connector.disconnect()
        if handles:
            logger.debug(f"Closed {len(handles)} project connection(s)")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_all()
        return False
