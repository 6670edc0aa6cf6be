"""Project database services module"""

from .project_database import ProjectDatabaseService, RecordLink, RecordView

__all__ = ["ProjectDatabaseService", "RecordLink", "RecordView"]
