"""
Project Model
=============

Project records as stored under projects/<slug>, plus the helpers that
derive slugs and parse the comma-separated skills input.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType

LINK_KEYS = ('github', 'linkedin', 'demo')


def slugify(text):
    """Create URL-friendly slug: "My Cool Project!" -> "my-cool-project" """
    slug = re.sub(r'[^a-z0-9]+', '-', (text or '').lower().strip())
    return slug.strip('-')


def parse_skills(text):
    """Split comma-separated skills, trimming and dropping blanks"""
    return [s.strip() for s in (text or '').split(',') if s.strip()]


def _text(value):
    return value if isinstance(value, str) else ''


def _text_list(value):
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


@dataclass(frozen=True)
class Project:
    slug: str
    name: str = ''
    description: str = ''
    full_description: str = ''
    skills: tuple = ()
    images: tuple = ()
    links: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    @property
    def thumbnail_url(self):
        """First image doubles as the thumbnail"""
        return self.images[0] if self.images else None

    @classmethod
    def from_record(cls, slug, record):
        """Build a Project from a stored mapping, tolerating missing fields"""
        links = record.get('links')
        if not isinstance(links, dict):
            links = {}
        return cls(
            slug=slug,
            name=_text(record.get('name')),
            description=_text(record.get('description')),
            full_description=_text(record.get('fullDescription')),
            skills=_text_list(record.get('skills')),
            images=_text_list(record.get('images')),
            links=MappingProxyType({
                key: links[key] for key in LINK_KEYS if isinstance(links.get(key), str)
            }),
        )

    def to_record(self):
        """Stored shape (the slug is the key, not a field)"""
        return {
            'name': self.name,
            'description': self.description,
            'fullDescription': self.full_description,
            'skills': list(self.skills),
            'links': {key: self.links.get(key, '') for key in LINK_KEYS},
            'images': list(self.images),
        }

    def to_dict(self):
        """JSON shape for templates and the public API"""
        data = self.to_record()
        data['slug'] = self.slug
        data['thumbnailUrl'] = self.thumbnail_url
        return data


def static_project_list(static_projects):
    """Static projects with positional slugs project-1, project-2, ..."""
    return tuple(
        Project.from_record(f"project-{idx + 1}", record)
        for idx, record in enumerate(static_projects)
    )
