"""
Site Defaults
=============

Static fallback content used wherever the settings document (or the project
collection) has nothing to say. Replace with your own details.
"""

DEFAULT_ACCENT_COLOR = '#1d4ed8'

DEFAULT_SETTINGS = {
    'name': 'Your Name',
    'title': 'Computer Engineering Undergraduate',
    'description': 'Personal portfolio and CV',
    'accentColor': DEFAULT_ACCENT_COLOR,
    'aboutMe': (
        'I am a passionate engineering student exploring the intersections of hardware '
        'and software. This space showcases my projects, experience and what I am '
        'currently learning.'
    ),
    'skills': ['JavaScript', 'React', 'Node.js', 'Python', 'Firebase', 'Cloudinary'],
    'experience': [
        {
            'company': 'Tech Company',
            'title': 'Intern Software Engineer',
            'dateRange': 'Jan 2025 - Present',
            'bullets': [
                'Collaborate on full-stack features using React and Node.js',
                'Contributed to services backed by Firebase and Cloudinary',
                'Wrote automation scripts that sped up deployments',
            ],
        },
        {
            'company': 'Student Project',
            'title': 'Open Source Contributor',
            'dateRange': '2023 - 2024',
            'bullets': [
                'Contributed bug fixes and features to university open source projects',
                'Implemented responsive UI components',
            ],
        },
    ],
    'education': [
        {
            'school': 'University School of Computing',
            'degree': 'BSc in Computer Engineering',
            'dateRange': '2022 - Present',
            'achievements': [
                "Dean's List for academic excellence",
                'Led a student branch project on IoT',
            ],
        },
    ],
    'social': {
        'email': 'your-email@example.com',
        'linkedin': 'https://linkedin.com/in/yourprofile',
        'twitter': 'https://twitter.com/yourhandle',
        'github': 'https://github.com/yourusername',
    },
    'profileImage': '',
}

# Shown when the projects collection is empty; slugs are assigned by position
STATIC_PROJECTS = [
    {
        'name': 'Portfolio Site',
        'description': 'This site: a CV page with a live-editable admin panel.',
        'fullDescription': (
            'Flask portfolio with a realtime settings document, per-section admin '
            'editing and a project gallery.'
        ),
        'skills': ['Python', 'Flask', 'Firebase'],
        'images': [],
        'links': {'github': 'https://github.com/yourusername/portfolio'},
    },
    {
        'name': 'IoT Weather Station',
        'description': 'Sensor node that streams readings to a web dashboard.',
        'fullDescription': '',
        'skills': ['C', 'MQTT', 'Python'],
        'images': [],
        'links': {},
    },
]
