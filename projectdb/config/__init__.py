"""Configuration module"""

from .project import Project, load_projects
from .settings import Settings, get_settings

__all__ = ["Project", "load_projects", "Settings", "get_settings"]
