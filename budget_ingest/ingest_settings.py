import os.path

from django.conf import settings

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

DEFAULT_BUDGET_SETTINGS = {
    'BUDGET_RULES': os.path.join(PACKAGE_DIR, 'rules', 'budget_inputs.yml'),
    'BUNDLE_SCHEMA': os.path.join(PACKAGE_DIR, 'schemas', 'seed_bundle.json'),
    'SMALL_WORKS_CATEGORY': 'Small Works',
    'SMALL_WORKS_REQUIRED_HEADERS': ['Priority', 'Location', 'Project'],
    'INGESTOR': 'budget_ingest.ingestors.Ingestor',
    # extra keyword arguments for tabulator.Stream
    'STREAM_ARGS': {},
}

BUDGET_SETTINGS = dict(DEFAULT_BUDGET_SETTINGS)
BUDGET_SETTINGS.update(getattr(settings, 'BUDGET_INGEST', {}))
