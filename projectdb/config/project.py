"""Project descriptors: the external database a tenant has registered"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field


class Project(BaseModel):
    """Read-only view of a project's connection descriptor and UI preferences"""

    id: int
    name: Optional[str] = None
    driver: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    users_table: Optional[str] = None
    feedbacks_table: Optional[str] = None
    pinned_tables: List[str] = Field(default_factory=list)

    def has_database(self) -> bool:
        """True when the descriptor is complete enough to connect"""
        required = (self.driver, self.host, self.database, self.username)
        return all(value is not None and value.strip() for value in required)

    @property
    def connection_name(self) -> str:
        """Name the project's connection is registered under"""
        return f"project_{self.id}"


def load_projects(path: str) -> Dict[int, Project]:
    """
    Load project descriptors from a YAML file

    The file holds a top-level ``projects`` list. A missing file yields no
    projects.

    Args:
        path: Path to the YAML file

    Returns:
        Mapping of project id to Project
    """
    projects_file = Path(path)
    if not projects_file.exists():
        logger.warning(f"Projects file not found: {projects_file}")
        return {}

    with open(projects_file, "r") as f:
        raw: Any = yaml.safe_load(f) or {}

    entries = raw.get("projects", []) if isinstance(raw, dict) else []
    projects = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        project = Project(**entry)
        projects[project.id] = project

    logger.info(f"Loaded {len(projects)} projects from {projects_file}")
    return projects
