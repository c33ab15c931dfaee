"""
Settings Schema
===============

Typed shape of the site settings document and the field-by-field merge that
turns a sparse (possibly malformed) remote document into a total value.

Stored keys are camelCase; attributes are snake_case. to_dict() gives the
stored shape back as plain, mutable JSON data.
"""

from dataclasses import dataclass, field
from types import MappingProxyType

from .defaults import DEFAULT_SETTINGS

KNOWN_KEYS = frozenset([
    'name',
    'title',
    'description',
    'accentColor',
    'aboutMe',
    'skills',
    'experience',
    'education',
    'social',
    'profileImage',
])

SOCIAL_CHANNELS = ('email', 'linkedin', 'twitter', 'github')


@dataclass(frozen=True)
class ExperienceEntry:
    company: str = ''
    title: str = ''
    date_range: str = ''
    bullets: tuple = ()

    def to_dict(self):
        return {
            'company': self.company,
            'title': self.title,
            'dateRange': self.date_range,
            'bullets': list(self.bullets),
        }


@dataclass(frozen=True)
class EducationEntry:
    school: str = ''
    degree: str = ''
    date_range: str = ''
    achievements: tuple = ()

    def to_dict(self):
        return {
            'school': self.school,
            'degree': self.degree,
            'dateRange': self.date_range,
            'achievements': list(self.achievements),
        }


@dataclass(frozen=True)
class SiteSettings:
    """Immutable snapshot of the settings document; every field is defined"""
    name: str = ''
    title: str = ''
    description: str = ''
    accent_color: str = ''
    about_me: str = ''
    skills: tuple = ()
    experience: tuple = ()
    education: tuple = ()
    social: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    profile_image: str = ''

    @property
    def initials(self):
        """Placeholder text shown when there is no profile image"""
        return ''.join(part[0] for part in self.name.split()[:2]).upper()

    def to_dict(self):
        return {
            'name': self.name,
            'title': self.title,
            'description': self.description,
            'accentColor': self.accent_color,
            'aboutMe': self.about_me,
            'skills': list(self.skills),
            'experience': [entry.to_dict() for entry in self.experience],
            'education': [entry.to_dict() for entry in self.education],
            'social': dict(self.social),
            'profileImage': self.profile_image,
        }


# ===== Type guards =====
# Each parser returns the typed value, or None when the input is absent or malformed.

def _parse_text(value):
    return value if isinstance(value, str) else None


def _parse_text_list(value):
    if not isinstance(value, list):
        return None
    if not all(isinstance(item, str) for item in value):
        return None
    return tuple(value)


def _parse_social(value):
    if not isinstance(value, dict):
        return None
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
        return None
    return MappingProxyType(dict(value))


def _entry_parser(cls, text_fields, list_field):
    """Build a parser for a list of entries; absent sub-fields are filled in"""
    def parse(value):
        if not isinstance(value, list):
            return None
        entries = []
        for item in value:
            if not isinstance(item, dict):
                return None
            kwargs = {}
            for key, attr in text_fields:
                text = item.get(key, '')
                if not isinstance(text, str):
                    return None
                kwargs[attr] = text
            items = _parse_text_list(item.get(list_field, []))
            if items is None:
                return None
            kwargs[list_field] = items
            entries.append(cls(**kwargs))
        return tuple(entries)
    return parse


_parse_experience = _entry_parser(
    ExperienceEntry,
    (('company', 'company'), ('title', 'title'), ('dateRange', 'date_range')),
    'bullets',
)

_parse_education = _entry_parser(
    EducationEntry,
    (('school', 'school'), ('degree', 'degree'), ('dateRange', 'date_range')),
    'achievements',
)

# stored key -> (attribute, parser, empty value)
FIELDS = (
    ('name', 'name', _parse_text, ''),
    ('title', 'title', _parse_text, ''),
    ('description', 'description', _parse_text, ''),
    ('accentColor', 'accent_color', _parse_text, ''),
    ('aboutMe', 'about_me', _parse_text, ''),
    ('skills', 'skills', _parse_text_list, ()),
    ('experience', 'experience', _parse_experience, ()),
    ('education', 'education', _parse_education, ()),
    ('social', 'social', _parse_social, MappingProxyType({})),
    ('profileImage', 'profile_image', _parse_text, ''),
)


def merge_settings(raw, defaults=None):
    """
    Overlay a sparse remote document onto the defaults, key by key.

    A remote value wins when it is present and well-typed; otherwise the
    default is used. Non-mapping input counts as an empty document.
    """
    if defaults is None:
        defaults = DEFAULT_SETTINGS
    elif isinstance(defaults, SiteSettings):
        defaults = defaults.to_dict()
    if not isinstance(raw, dict):
        raw = {}

    values = {}
    for key, attr, parse, empty in FIELDS:
        value = parse(raw.get(key))
        if value is None:
            value = parse(defaults.get(key))
        values[attr] = empty if value is None else value
    return SiteSettings(**values)


def filter_known_keys(partial):
    """Keep only whitelisted settings keys"""
    return {key: value for key, value in partial.items() if key in KNOWN_KEYS}
