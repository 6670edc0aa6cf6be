"""FastAPI application exposing project database browsing"""

import sys
from functools import lru_cache
from typing import Dict, Iterator, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from ..config.project import Project, load_projects
from ..config.settings import get_settings
from ..connectors.errors import ProjectDatabaseError
from ..connectors.registry import ConnectionRegistry
from ..services.project_database import ProjectDatabaseService

settings = get_settings()

logger.remove()
logger.add(sys.stderr, level=settings.log_level)

app = FastAPI(
    title="Project Database Browser API",
    description="Browse the tables of a project's external database",
    version="0.1.0",
)


@lru_cache()
def get_projects() -> Dict[int, Project]:
    """Projects known to the application"""
    return load_projects(settings.projects_file)


def get_registry() -> Iterator[ConnectionRegistry]:
    """Connection registry scoped to the current request"""
    with ConnectionRegistry(settings) as registry:
        yield registry


def get_service(
    project_id: int,
    projects: Dict[int, Project] = Depends(get_projects),
    registry: ConnectionRegistry = Depends(get_registry),
) -> ProjectDatabaseService:
    project = projects.get(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return ProjectDatabaseService(project, registry=registry, settings=settings)


def require_table(service: ProjectDatabaseService, table: str) -> None:
    if not service.has_table(table):
        raise HTTPException(status_code=404, detail=f"Table '{table}' not found")


@app.exception_handler(ProjectDatabaseError)
async def project_database_error_handler(request: Request, exc: ProjectDatabaseError):
    logger.error(f"Database error on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=502, content={"detail": exc.message})


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.get("/projects/{project_id}/connection")
def test_connection(service: ProjectDatabaseService = Depends(get_service)):
    """Check whether the project's database is reachable"""
    return service.test_connection().to_dict()


@app.get("/projects/{project_id}/tables")
def list_tables(service: ProjectDatabaseService = Depends(get_service)):
    return {
        "has_database": service.project.has_database(),
        "tables": service.get_tables(),
    }


@app.get("/projects/{project_id}/pinned")
def pinned_tables(service: ProjectDatabaseService = Depends(get_service)):
    return {"tables": service.get_pinned_tables()}


@app.get("/projects/{project_id}/tables/{table}/schema")
def table_schema(table: str, service: ProjectDatabaseService = Depends(get_service)):
    """Columns, primary key and foreign keys of a table"""
    require_table(service, table)
    schema = service.get_table_schema(table)
    return schema.to_dict()


@app.get("/projects/{project_id}/tables/{table}/rows")
def table_rows(
    table: str,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    service: ProjectDatabaseService = Depends(get_service),
):
    """One page of a table's rows"""
    require_table(service, table)
    return service.get_table_data(table, per_page=per_page, page=page).to_dict()


@app.get("/projects/{project_id}/tables/{table}/records/{record_id}")
def table_record(
    table: str,
    record_id: str,
    service: ProjectDatabaseService = Depends(get_service),
):
    """A single record with resolved foreign key links"""
    require_table(service, table)
    record = service.get_record(table, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record '{record_id}' not found in '{table}'")
    return record.to_dict()


@app.get("/projects/{project_id}/users")
def users(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    service: ProjectDatabaseService = Depends(get_service),
):
    return service.get_users(per_page=per_page, page=page).to_dict()


@app.get("/projects/{project_id}/feedback")
def feedback(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    service: ProjectDatabaseService = Depends(get_service),
):
    return service.get_feedbacks(per_page=per_page, page=page).to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
