"""
Project Editor
==============

Create/edit form for a single project record plus delete. The form is in
"create" mode until edit() binds it to an existing slug; submit() writes the
full record at projects/<slug> and drops back to create mode.
"""

import threading

from ...core.errors import ConfigurationError, FolioError, ValidationError
from ...core.logging_service import LoggingService
from .models import LINK_KEYS, parse_skills, slugify


class ProjectEditor:
    FIELDS = ('name', 'description', 'full_description', 'skills_text', 'github', 'linkedin', 'demo')

    def __init__(self, document_store, uploader=None, report=None, path='projects'):
        self._documents = document_store
        self._uploader = uploader
        self._report = report or self._set_status
        self._path = path
        self._lock = threading.Lock()
        self._saving = False
        self.closed = False
        self.status = ''
        self.status_level = 'info'
        self.reset()

    def _set_status(self, message, level='info'):
        self.status = message
        self.status_level = level

    @property
    def mode(self):
        return 'edit' if self.editing_slug else 'create'

    @property
    def saving(self):
        return self._saving

    def reset(self):
        """Clear every field and drop the bound slug"""
        self.editing_slug = None
        self.name = ''
        self.description = ''
        self.full_description = ''
        self.skills_text = ''
        self.github = ''
        self.linkedin = ''
        self.demo = ''
        self.images = []
        self.scroll_to_top = False

    def cancel(self):
        self.reset()

    def edit(self, project):
        """Load an existing project into the form"""
        self.editing_slug = project.slug
        self.name = project.name
        self.description = project.description
        self.full_description = project.full_description
        self.skills_text = ', '.join(project.skills)
        self.github = project.links.get('github', '')
        self.linkedin = project.links.get('linkedin', '')
        self.demo = project.links.get('demo', '')
        self.images = list(project.images)
        # the view jumps back to the form at the top of the page
        self.scroll_to_top = True

    def update_fields(self, **fields):
        unknown = sorted(set(fields) - set(self.FIELDS))
        if unknown:
            raise ValidationError(f"Unknown project fields: {', '.join(unknown)}")
        for key, value in fields.items():
            setattr(self, key, '' if value is None else str(value))

    # ===== Images =====

    def add_image(self, url):
        url = (url or '').strip()
        if not url:
            self._report('Project image upload failed. Please try again.', 'error')
            return False
        self.images.append(url)
        return True

    def upload_image(self, file_bytes, filename):
        """Send a file to the upload collaborator and append the returned URL"""
        try:
            if self._uploader is None:
                raise ConfigurationError('No upload destination is configured.')
            url = self._uploader(file_bytes, filename, 'projects')
        except FolioError as e:
            LoggingService.warning('projects', f"Project image upload failed: {e}")
            if not self.closed:
                self._report(f"Project image upload failed: {e}", 'error')
            return None

        if not self.closed and self.add_image(url):
            self._report('Image uploaded.', 'success')
        return url

    def remove_image(self, index):
        if not 0 <= index < len(self.images):
            self._report('No image at that position.', 'error')
            return False
        self.images.pop(index)
        return True

    # ===== Persistence =====

    def build_record(self):
        """Validate the form and return (slug, record); raises ValidationError"""
        name = self.name.strip()
        if not name or not self.images:
            raise ValidationError('Project name and at least one image are required.')

        slug = self.editing_slug or slugify(name)
        if not slug:
            raise ValidationError('Project name must contain at least one letter or digit.')

        links = {'github': self.github, 'linkedin': self.linkedin, 'demo': self.demo}
        record = {
            'name': name,
            'description': self.description,
            'fullDescription': self.full_description,
            'skills': parse_skills(self.skills_text),
            'links': {key: links[key].strip() for key in LINK_KEYS},
            'images': list(self.images),
        }
        return slug, record

    def submit(self):
        """Write the full record at projects/<slug>; True on success"""
        try:
            slug, record = self.build_record()
        except ValidationError as e:
            self._report(str(e), 'error')
            return False

        with self._lock:
            if self._saving:
                self._report('A project save is already in progress.', 'info')
                return False
            self._saving = True

        editing = self.editing_slug is not None
        try:
            self._documents.set(f"{self._path}/{slug}", record)
        except Exception as e:
            LoggingService.log_error_with_traceback('projects', e, {'slug': slug})
            if not self.closed:
                self._report(f"Error saving project: {e}", 'error')
            return False
        finally:
            with self._lock:
                self._saving = False

        LoggingService.log_user_action('projects', f"{'Updated' if editing else 'Created'} project {slug}")
        if not self.closed:
            self._report(f"Project {'updated' if editing else 'saved'} successfully.", 'success')
            self.reset()
        return True

    def delete(self, slug):
        """Remove projects/<slug>; the list refreshes through the live subscription"""
        try:
            self._documents.remove(f"{self._path}/{slug}")
        except Exception as e:
            LoggingService.log_error_with_traceback('projects', e, {'slug': slug})
            if not self.closed:
                self._report(f"Error deleting project: {e}", 'error')
            return False

        LoggingService.log_user_action('projects', f"Deleted project {slug}")
        if not self.closed:
            self._report('Project deleted.', 'success')
        return True

    def state(self):
        return {
            'mode': self.mode,
            'editingSlug': self.editing_slug,
            'name': self.name,
            'description': self.description,
            'fullDescription': self.full_description,
            'skills': self.skills_text,
            'links': {'github': self.github, 'linkedin': self.linkedin, 'demo': self.demo},
            'images': list(self.images),
            'scrollToTop': self.scroll_to_top,
            'saving': self._saving,
        }
