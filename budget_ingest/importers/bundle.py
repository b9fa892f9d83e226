"""
JSON bundle importer.

A bundle carries related records keyed across sections:

    {
        "facilities":  [{"code": "EWHS", "name": ..., "taxRatePercent": "10.6%"}],
        "projects":    [{"importKey": ..., "facilityCode": "EWHS", "title": ...}],
        "budgets":     [{"projectImportKey": ..., "baseBidPlusAlts": "$100,000", ...}],
        "estimates":   [{"projectImportKey": ..., "estimateType": ..., "estimatedCost": ...}],
        "attachments": [{"projectImportKey": ..., "url": ...}]
    }

The bundle's shape is checked against a JSON Schema before anything is
read.  Records that are well formed but unusable (no facility code,
unknown project, ...) are skipped with a warning.
"""
import logging
import posixpath
from urllib.parse import urlparse

from django.utils.dateparse import parse_date, parse_datetime

from ..calculations import (
    MONEY_DIGITS,
    RATE_DIGITS,
    compute_all_fields,
    fits_digits,
    oversized_fields,
    validate_inputs,
)
from ..import_keys import generate_import_key_with_priority, is_valid_import_key
from ..ingest_settings import BUDGET_SETTINGS
from ..sanitizers import sanitize_currency, sanitize_integer, sanitize_percentage
from ..validators import SchemaValidator
from .result import BundleResult

logger = logging.getLogger(__name__)

# bundle key -> (budget input field, sanitizer)
BUDGET_INPUTS = (
    ('approvedBudgetTotal', 'approved_budget_total', sanitize_currency),
    ('baseBidPlusAlts', 'base_bid_plus_alts', sanitize_currency),
    ('changeOrdersTotal', 'change_orders_total', sanitize_currency),
    ('salesTaxRatePercent', 'sales_tax_rate_percent', sanitize_percentage),
    ('cpoManagementRatePercent', 'cpo_management_rate_percent', sanitize_percentage),
    ('techMisc', 'tech_misc', sanitize_currency),
    ('consultants', 'consultants', sanitize_currency),
)


def parse_as_of_date(value):
    """ISO date or datetime string -> date; None when absent or unreadable"""
    if not value:
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        return None
    if parsed is None:
        try:
            moment = parse_datetime(value)
        except ValueError:
            return None
        parsed = moment.date() if moment else None
    return parsed


class BundleImporter:

    def __init__(self, schema=None, known_facility_codes=()):
        """
        :param schema: JSON Schema location, defaults to BUDGET_INGEST['BUNDLE_SCHEMA']
        :param known_facility_codes: facility codes that already exist outside
                                     the bundle and may be referenced by projects,
                                     or a dict of such codes -> tax rate percent
        """
        self.validator = SchemaValidator(schema or BUDGET_SETTINGS['BUNDLE_SCHEMA'])
        if isinstance(known_facility_codes, dict):
            self.known_tax_rates = dict(known_facility_codes)
        else:
            self.known_tax_rates = dict.fromkeys(known_facility_codes)

    def load(self, bundle):
        result = BundleResult()

        problems = self.validator.errors(bundle)
        if problems:
            for problem in problems:
                result.add_error('bundle', 0, problem)
            return result

        tax_rates = self.load_facilities(bundle.get('facilities') or [], result)
        project_facilities = self.load_projects(bundle.get('projects') or [], tax_rates, result)
        self.load_budgets(bundle.get('budgets') or [], project_facilities, tax_rates, result)
        self.load_estimates(bundle.get('estimates') or [], project_facilities, result)
        self.load_attachments(bundle.get('attachments') or [], project_facilities, result)

        logger.info(f'bundle loaded: {dict(result.summary)}')
        return result

    def load_facilities(self, facilities, result):
        """:return: dict of facility code -> tax rate (or None)"""
        tax_rates = dict(self.known_tax_rates)
        for (n, f) in enumerate(facilities, start=1):
            code = (f.get('code') or '').strip()
            if not code:
                result.skip('facilities', n, 'Skipping facility with no code')
                continue

            tax_rate = sanitize_percentage(f.get('taxRatePercent'))
            if not fits_digits(tax_rate, RATE_DIGITS):
                result.add_warning('facilities', n, f'Tax rate {tax_rate} is too large, ignoring it')
                tax_rate = None
            tax_rates[code] = tax_rate
            result.add_record('facilities', {
                'code': code,
                'name': f.get('name') or code,
                'jurisdiction': f.get('jurisdiction') or None,
                'type': f.get('type') or 'SCHOOL',
                'region': f.get('region') or None,
                'tax_rate_percent': tax_rate,
            })
        return tax_rates

    def load_projects(self, projects, facilities, result):
        """:return: dict of import key -> facility code"""
        project_facilities = {}
        for (n, p) in enumerate(projects, start=1):
            title = (p.get('title') or '').strip()
            facility_code = (p.get('facilityCode') or '').strip()
            if not title or not facility_code:
                result.skip('projects', n, 'Skipping project missing title or facilityCode')
                continue
            if facility_code not in facilities:
                result.skip('projects', n, f'Facility not found for code {facility_code}, skipping project: {title}')
                continue

            priority = sanitize_integer(p.get('priorityCode'))
            import_key = (p.get('importKey') or '').strip()
            if not import_key:
                import_key = generate_import_key_with_priority(
                    p.get('category') or '', facility_code, title, priority)
                result.add_warning('projects', n, f'No importKey given, derived {import_key[:16]}')
            elif not is_valid_import_key(import_key):
                result.skip('projects', n, f'Invalid importKey {import_key[:16]!r}, skipping project: {title}')
                continue

            project_facilities[import_key] = facility_code
            result.add_record('projects', {
                'import_key': import_key,
                'facility_code': facility_code,
                'name': title,
                'category': p.get('category') or None,
                'priority': priority,
                'status': p.get('status') or 'ACTIVE',
                'jurisdiction': p.get('jurisdiction') or None,
                'notes': p.get('notes') or None,
            })
        return project_facilities

    def load_budgets(self, budgets, project_facilities, tax_rates, result):
        for (n, b) in enumerate(budgets, start=1):
            import_key = b.get('projectImportKey')
            if not import_key:
                result.skip('budgets', n, 'Skipping budget with no projectImportKey')
                continue
            if import_key not in project_facilities:
                result.skip('budgets', n, f'Project not found for importKey {import_key}, skipping budget')
                continue

            inputs = {field: sanitize(b.get(key)) for (key, field, sanitize) in BUDGET_INPUTS}
            if inputs['sales_tax_rate_percent'] is None:
                # facility rate applies when the sheet leaves it blank
                inputs['sales_tax_rate_percent'] = tax_rates.get(project_facilities[import_key])

            for message in validate_inputs(inputs):
                result.add_warning('budgets', n, message)

            record = {
                'project_import_key': import_key,
                'as_of_date': parse_as_of_date(b.get('asOfDate')),
            }
            record.update(inputs)
            record.update(compute_all_fields(inputs))

            oversized = oversized_fields(record)
            if oversized:
                result.skip('budgets', n, 'Too large to store ({}), skipping budget'.format(', '.join(oversized)))
                continue
            result.add_record('budgets', record)

    def load_estimates(self, estimates, project_facilities, result):
        for (n, e) in enumerate(estimates, start=1):
            import_key = e.get('projectImportKey')
            if not import_key or not e.get('estimateType'):
                result.skip('estimates', n, 'Skipping estimate missing projectImportKey or estimateType')
                continue
            if import_key not in project_facilities:
                result.skip('estimates', n, f'Project not found for importKey {import_key}, skipping estimate')
                continue

            estimated_cost = sanitize_currency(e.get('estimatedCost'))
            if not fits_digits(estimated_cost, MONEY_DIGITS):
                result.skip('estimates', n, f'Estimated cost {estimated_cost} is too large, skipping estimate')
                continue
            if estimated_cost is None:
                result.add_warning('estimates', n, 'Missing estimated cost')
            result.add_record('estimates', {
                'project_import_key': import_key,
                'estimate_type': e['estimateType'],
                'estimated_cost': estimated_cost,
                'as_of_date': parse_as_of_date(e.get('asOfDate')),
                'notes': e.get('notes') or None,
            })

    def load_attachments(self, attachments, project_facilities, result):
        for (n, a) in enumerate(attachments, start=1):
            import_key = a.get('projectImportKey')
            url = a.get('url')
            if not import_key or not url:
                result.skip('attachments', n, 'Skipping attachment missing projectImportKey or url')
                continue
            if import_key not in project_facilities:
                result.skip('attachments', n, f'Project not found for importKey {import_key}, skipping attachment')
                continue

            result.add_record('attachments', {
                'project_import_key': import_key,
                'url': url,
                'file_name': a.get('label') or a.get('fileName') or posixpath.basename(urlparse(url).path) or url,
                'file_size': a.get('fileSize'),
                'file_type': a.get('fileType') or None,
            })


def load_bundle(bundle, known_facility_codes=()):
    return BundleImporter(known_facility_codes=known_facility_codes).load(bundle)
