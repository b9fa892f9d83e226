"""
Deterministic identity keys for imported projects.

The key is the SHA-256 of the normalized (category, facility, title)
triple, so importing the same sheet twice updates the same projects
instead of creating duplicates.
"""
import hashlib
import re
from collections import OrderedDict

KEY_DELIMITER = '|'
PRIORITY_WIDTH = 3
SHORT_KEY_LENGTH = 16

VALID_KEY = re.compile(r'^[a-f0-9]{64}$')


def normalize_text(text):
    """trim, lowercase, collapse whitespace, drop punctuation other than hyphens"""
    text = str(text).strip().lower()
    text = re.sub(r'\s+', ' ', text)
    return re.sub(r'[^\w\s-]', '', text, flags=re.ASCII)


def generate_import_key(category, facility_code, project_title):
    composite = KEY_DELIMITER.join(
        normalize_text(part) for part in (category, facility_code, project_title))
    return hashlib.sha256(composite.encode('utf-8')).hexdigest()


def generate_import_key_with_priority(category, facility_code, project_title, priority=None):
    """
    Import key that also distinguishes line items by priority

    Small Works lists repeat titles across priorities, so the zero-padded
    priority is prefixed to the title before hashing.
    """
    if priority is not None and priority != '':
        padded = str(priority).strip().rjust(PRIORITY_WIDTH, '0')
        project_title = f'{padded}-{project_title}'
    return generate_import_key(category, facility_code, project_title)


def generate_import_key_batch(category, projects):
    """
    Keys for many projects at once

    :param projects: iterable of dicts with `facility_code`, `project_title`
                     and optionally `priority`
    :return: OrderedDict of project title -> import key
    """
    keys = OrderedDict()
    for project in projects:
        keys[project['project_title']] = generate_import_key_with_priority(
            category,
            project['facility_code'],
            project['project_title'],
            project.get('priority'),
        )
    return keys


def is_valid_import_key(key):
    return isinstance(key, str) and bool(VALID_KEY.fullmatch(key))


def generate_short_import_key(category, facility_code, project_title):
    """Abbreviated key for logs and display; store the full key"""
    return generate_import_key(category, facility_code, project_title)[:SHORT_KEY_LENGTH]
