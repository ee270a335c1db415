"""Saved project storage backed by diskcache."""

import datetime
import logging
import sqlite3
import time
from typing import List, Optional

from diskcache import Cache

from ..core.config import settings
from ..core.constants import FileConstants
from ..core.exceptions import ProjectNotFoundError, ProjectSaveError
from ..core.models import ExportedAnalysis, SavedProject
from ..core.scoring import share

logger = logging.getLogger(__name__)


class ProjectStore:
    """Keyed store of saved analyses. Nothing is ever evicted."""

    def __init__(self, directory: str = None, cache: Cache = None):
        self.directory = directory or settings.projects_dir
        self.cache = cache if cache is not None else Cache(self.directory, eviction_policy="none")

    def _new_id(self) -> str:
        project_id = str(int(time.time() * 1000))
        while project_id in self.cache:
            project_id = str(int(project_id) + 1)
        return project_id

    def save(self, data: ExportedAnalysis, name: Optional[str] = None) -> SavedProject:
        """Persist an analysis. Raises ProjectSaveError if the store cannot write it."""
        name = name or FileConstants.PROJECT_NAME_TEMPLATE.format(column=data.metadata.column_analyzed)
        project = SavedProject(
            id=self._new_id(),
            name=name,
            date=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            data=data,
        )
        try:
            self.cache.set(project.id, project.to_dict())
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Failed to save project '{name}': {e}")
            raise ProjectSaveError(
                f"Failed to save project '{name}'. The data might be too large for the project store."
            ) from e
        logger.info(f"Saved project '{name}' as {project.id}")
        return project

    def get(self, project_id: str) -> SavedProject:
        data = self.cache.get(project_id)
        if data is None:
            raise ProjectNotFoundError(project_id)
        return SavedProject.from_dict(data)

    def list(self) -> List[SavedProject]:
        """All saved projects, oldest first."""
        projects = []
        for key in self.cache.iterkeys():
            data = self.cache.get(key)
            if data is not None:
                projects.append(SavedProject.from_dict(data))
        projects.sort(key=lambda p: (p.date, p.id))
        return projects

    def delete(self, project_id: str) -> None:
        if not self.cache.delete(project_id):
            raise ProjectNotFoundError(project_id)
        logger.info(f"Deleted project {project_id}")

    def __len__(self) -> int:
        return len(self.cache)

    def close(self) -> None:
        self.cache.close()


def describe_project(project: SavedProject) -> str:
    """One-line listing: name, date, comment count and positive share."""
    stats = project.data.stats
    date = project.date[:10]
    return (
        f"{project.id}  {project.name}  {date}  {stats.total} comments  "
        f"{share(stats.positive, stats.total):.1f}% Positive"
    )
