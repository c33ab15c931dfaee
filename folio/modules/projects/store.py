"""
Projects Store
==============

Live, ordered list of projects mirrored from the projects collection, with
the static project list standing in while the collection is empty.
"""

from ...core.live import LiveStore
from ...core.logging_service import LoggingService
from ..settings.defaults import STATIC_PROJECTS
from .models import Project, static_project_list


class ProjectsStore(LiveStore):
    """Maps the keyed collection to Projects in the order the transport gives"""

    source = 'projects'

    def __init__(self, document_store, static_projects=None, path='projects'):
        self.static_projects = static_project_list(
            STATIC_PROJECTS if static_projects is None else static_projects
        )
        super().__init__(document_store, path, self.static_projects)

    def _transform(self, raw):
        if not isinstance(raw, dict) or not raw:
            return self.static_projects

        projects = []
        for slug, record in raw.items():
            if not isinstance(record, dict):
                LoggingService.warning(self.source, f"Skipping malformed project record '{slug}'")
                continue
            projects.append(Project.from_record(slug, record))
        return tuple(projects) if projects else self.static_projects

    def find(self, slug):
        """Project with this slug in the live list, or None"""
        return next((p for p in self.snapshot if p.slug == slug), None)

    def resolve(self, slug):
        """Live project by slug, else the static project at that positional slug"""
        project = self.find(slug)
        if project is not None:
            return project
        return next((p for p in self.static_projects if p.slug == slug), None)
