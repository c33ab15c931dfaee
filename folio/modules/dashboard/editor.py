"""
Admin Editor
============

Multi-section form controller behind the admin dashboard.

Each settings section keeps its own local draft, seeded from the settings
snapshot. Live pushes never touch the drafts; only select_tab() re-seeds the
section it opens. Saving a section writes just that section's keys with a
partial update, so concurrent edits to other sections are not overwritten.
"""

import copy
import threading

from ...core.errors import ConfigurationError, FolioError, ValidationError, VerificationError
from ...core.logging_service import LoggingService
from ..projects.editor import ProjectEditor
from ..settings.defaults import DEFAULT_ACCENT_COLOR
from ..settings.schema import SOCIAL_CHANNELS, filter_known_keys

SECTIONS = ('projects', 'general', 'about', 'skills', 'experience', 'education', 'social', 'profile')

SECTION_KEYS = {
    'general': ('name', 'title', 'description', 'accentColor'),
    'about': ('aboutMe',),
    'skills': ('skills',),
    'experience': ('experience',),
    'education': ('education',),
    'social': ('social',),
    'profile': ('profileImage',),
}

SECTION_LABELS = {
    'general': 'General settings',
    'about': 'About section',
    'skills': 'Skills',
    'experience': 'Experience',
    'education': 'Education',
    'social': 'Social links',
    'profile': 'Profile image',
}

# section -> (text fields, nested list field) for the entry lists
LIST_SECTIONS = {
    'experience': (('company', 'title', 'dateRange'), 'bullets'),
    'education': (('school', 'degree', 'dateRange'), 'achievements'),
}

GENERAL_TEXT_KEYS = ('name', 'title', 'description')


def _as_text(value):
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


def _normalize_entries(entries, text_fields, list_field):
    """String-only entries, so the stored list passes the settings merge"""
    if not isinstance(entries, list):
        return []
    normalized = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        item = {key: _as_text(entry.get(key)) for key in text_fields}
        items = entry.get(list_field)
        item[list_field] = [_as_text(v) for v in items] if isinstance(items, list) else []
        normalized.append(item)
    return normalized


class AdminEditor:
    def __init__(self, settings_store, document_store, projects_store=None, uploader=None,
                 settings_path='settings', projects_path='projects'):
        self.settings_store = settings_store
        self.projects_store = projects_store
        self._documents = document_store
        self._uploader = uploader
        self._path = settings_path
        self._lock = threading.Lock()
        self._in_flight = set()

        self.closed = False
        self.active_tab = 'projects'
        self.status = ''
        self.status_level = 'info'
        self.skill_input = ''
        self.pending_profile_image = None

        self.projects = ProjectEditor(
            document_store, uploader=uploader, report=self._set_status, path=projects_path
        )

        snapshot = self.settings_store.snapshot.to_dict()
        self.drafts = {
            section: {key: copy.deepcopy(snapshot[key]) for key in keys}
            for section, keys in SECTION_KEYS.items()
        }

    def _set_status(self, message, level='info'):
        self.status = message
        self.status_level = level

    # ===== Tabs and drafts =====

    def _check_section(self, section, allowed=None):
        if section not in (allowed or SECTIONS):
            raise ValidationError(f"Unknown section: {section}")

    def reseed(self, section):
        """Replace one section's draft with the values from the current snapshot"""
        snapshot = self.settings_store.snapshot.to_dict()
        self.drafts[section] = {
            key: copy.deepcopy(snapshot[key]) for key in SECTION_KEYS[section]
        }

    def select_tab(self, section):
        self._check_section(section)
        self.active_tab = section
        if section in SECTION_KEYS:
            self.reseed(section)

    def update_field(self, section, field, value):
        self._check_section(section, SECTION_KEYS)
        if field not in SECTION_KEYS[section]:
            raise ValidationError(f"'{field}' is not part of the {section} section")
        self.drafts[section][field] = value

    # ===== Experience / education lists =====

    def _entries(self, section):
        self._check_section(section, LIST_SECTIONS)
        entries = self.drafts[section].get(section)
        if not isinstance(entries, list):
            entries = self.drafts[section][section] = []
        return entries

    def _entry(self, section, index):
        entries = self._entries(section)
        if not 0 <= index < len(entries):
            raise ValidationError(f"No {section} entry at position {index}")
        return entries[index]

    def add_entry(self, section):
        entries = self._entries(section)
        text_fields, list_field = LIST_SECTIONS[section]
        entry = {key: '' for key in text_fields}
        entry[list_field] = ['']
        entries.append(entry)
        return len(entries) - 1

    def update_entry(self, section, index, field, value):
        entry = self._entry(section, index)
        text_fields, _ = LIST_SECTIONS[section]
        if field not in text_fields:
            raise ValidationError(f"'{field}' is not an editable {section} field")
        entry[field] = value

    def add_list_item(self, section, index):
        entry = self._entry(section, index)
        _, list_field = LIST_SECTIONS[section]
        entry.setdefault(list_field, []).append('')

    def update_list_item(self, section, index, item_index, value):
        entry = self._entry(section, index)
        _, list_field = LIST_SECTIONS[section]
        items = entry.setdefault(list_field, [])
        if not 0 <= item_index < len(items):
            raise ValidationError(f"No {list_field} item at position {item_index}")
        items[item_index] = value

    def remove_entry(self, section, index):
        self._entry(section, index)
        self._entries(section).pop(index)

    # ===== Skills =====

    def set_skill_input(self, text):
        self.skill_input = text or ''

    def add_skill(self):
        skill = self.skill_input.strip()
        if not skill:
            return False
        self.drafts['skills'].setdefault('skills', []).append(skill)
        self.skill_input = ''
        return True

    def remove_skill(self, index):
        skills = self.drafts['skills'].setdefault('skills', [])
        if not 0 <= index < len(skills):
            raise ValidationError(f"No skill at position {index}")
        skills.pop(index)

    # ===== Social =====

    def update_social(self, channel, value):
        if channel not in SOCIAL_CHANNELS:
            raise ValidationError(f"Unknown social channel: {channel}")
        social = self.drafts['social'].get('social')
        if not isinstance(social, dict):
            social = self.drafts['social']['social'] = {}
        social[channel] = value

    # ===== Saving =====

    def _begin(self, section):
        with self._lock:
            if section in self._in_flight:
                return False
            self._in_flight.add(section)
            return True

    def _end(self, section):
        with self._lock:
            self._in_flight.discard(section)

    def is_saving(self, section):
        with self._lock:
            return section in self._in_flight

    def build_partial(self, section):
        """Normalized, whitelisted partial document for one section's draft"""
        draft = copy.deepcopy(self.drafts[section])
        partial = {key: draft.get(key) for key in SECTION_KEYS[section]}

        if section == 'general':
            for key in GENERAL_TEXT_KEYS:
                if not isinstance(partial[key], str):
                    partial[key] = ''
            accent = partial['accentColor']
            if not isinstance(accent, str) or not accent.strip():
                partial['accentColor'] = DEFAULT_ACCENT_COLOR
        elif section == 'skills':
            skills = partial['skills'] if isinstance(partial['skills'], list) else []
            partial['skills'] = [s for s in skills if isinstance(s, str) and s.strip()]
        elif section in LIST_SECTIONS:
            partial[section] = _normalize_entries(partial[section], *LIST_SECTIONS[section])

        return filter_known_keys(partial)

    def save(self, section):
        """Persist one section; True on success"""
        self._check_section(section)
        if section == 'projects':
            return self.projects.submit()
        if section == 'profile':
            return self.save_profile_image()

        label = SECTION_LABELS[section]
        if not self._begin(section):
            self._set_status(f"{label}: a save is already in progress.", 'info')
            return False

        partial = self.build_partial(section)
        try:
            self._documents.update(self._path, partial)
        except Exception as e:
            LoggingService.log_error_with_traceback('dashboard', e, {'section': section})
            if not self.closed:
                self._set_status(f"Error saving {label.lower()}: {e}", 'error')
            return False
        finally:
            self._end(section)

        LoggingService.log_user_action('dashboard', f"Saved {section} settings",
                                       details={'keys': sorted(partial)})
        if not self.closed:
            self._set_status(f"{label} saved successfully.", 'success')
        return True

    # ===== Profile image =====

    @property
    def profile_preview(self):
        return self.pending_profile_image or self.drafts['profile'].get('profileImage') or ''

    def stage_profile_image(self, url):
        url = (url or '').strip()
        if not url:
            self._set_status('Enter an image URL first.', 'error')
            return False
        self.pending_profile_image = url
        self.drafts['profile']['profileImage'] = url
        return True

    def upload_profile_image(self, file_bytes, filename):
        """Upload a new profile image and stage its URL; the URL or None"""
        try:
            if self._uploader is None:
                raise ConfigurationError('No upload destination is configured.')
            url = self._uploader(file_bytes, filename, 'profile')
        except FolioError as e:
            LoggingService.warning('dashboard', f"Profile image upload failed: {e}")
            if not self.closed:
                self._set_status(f"Profile image upload failed: {e}", 'error')
            return None

        if not self.closed and self.stage_profile_image(url):
            self._set_status('Image uploaded. Save to publish it.', 'info')
        return url

    def save_profile_image(self):
        """Write the chosen profile image URL and confirm it by reading it back"""
        url = (self.pending_profile_image or self.drafts['profile'].get('profileImage') or '')
        url = url.strip() if isinstance(url, str) else ''
        if not url:
            self._set_status('Choose an image before saving.', 'error')
            return False

        if not self._begin('profile'):
            self._set_status('Profile image is already being saved.', 'info')
            return False

        path = f"{self._path}/profileImage"
        try:
            self._documents.set(path, url)
            stored = self._documents.get(path)
            if stored != url:
                raise VerificationError('Profile image did not save correctly. Please try again.')
        except VerificationError as e:
            LoggingService.warning('dashboard', str(e), {'expected': url})
            if not self.closed:
                self._set_status(str(e), 'error')
            return False
        except Exception as e:
            LoggingService.log_error_with_traceback('dashboard', e, {'section': 'profile'})
            if not self.closed:
                self._set_status(f"Error saving profile image: {e}", 'error')
            return False
        finally:
            self._end('profile')

        LoggingService.log_user_action('dashboard', 'Updated profile image')
        if not self.closed:
            self.pending_profile_image = None
            self.drafts['profile']['profileImage'] = url
            self._set_status('Profile image saved successfully.', 'success')
        return True

    # ===== Lifecycle =====

    def close(self):
        """Tear down; results of in-flight saves no longer touch this editor"""
        self.closed = True
        self.projects.closed = True

    def state(self):
        with self._lock:
            saving = sorted(self._in_flight)
        if self.projects.saving:
            saving.append('projects')

        project_list = []
        if self.projects_store is not None:
            project_list = [project.to_dict() for project in self.projects_store.snapshot]

        return {
            'activeTab': self.active_tab,
            'drafts': copy.deepcopy(self.drafts),
            'skillInput': self.skill_input,
            'pendingProfileImage': self.pending_profile_image,
            'profilePreview': self.profile_preview,
            'initials': self.settings_store.snapshot.initials,
            'status': self.status,
            'statusLevel': self.status_level,
            'saving': saving,
            'closed': self.closed,
            'projectForm': self.projects.state(),
            'projects': project_list,
        }
