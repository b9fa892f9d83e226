"""
Small Works sheet importer.

Expected headers (any known spelling, see `headers.HEADER_ALIASES`):
Priority, Location, Project, Jurisdiction, Estimated Cost,
Funding Source, Actual Cost, Variance, Notes, Links.
"""
import logging
import re
from collections import namedtuple

from ..calculations import MONEY_DIGITS, calculate_variance, fits_digits
from ..headers import get_value_by_header, validate_required_headers
from ..import_keys import generate_import_key_with_priority
from ..ingest_settings import BUDGET_SETTINGS
from ..sanitizers import sanitize_currency, sanitize_integer
from .result import ParseResult

logger = logging.getLogger(__name__)

ImportRow = namedtuple('ImportRow', [
    'import_key',
    'category',
    'priority',
    'facility_code',
    'project_title',
    'jurisdiction',
    'estimated_cost',
    'funding_source',
    'actual_cost',
    'variance',
    'notes',
    'links',
    'completion_year',
    'row_number',
])

COMPLETION_YEAR = re.compile(r'20\d{2}')


class SmallWorksParser:
    """Turn a grid of strings (header row first) into ImportRows"""

    def __init__(self, category=None, required_headers=None):
        self.category = category or BUDGET_SETTINGS['SMALL_WORKS_CATEGORY']
        self.required_headers = required_headers or BUDGET_SETTINGS['SMALL_WORKS_REQUIRED_HEADERS']

    def parse(self, grid):
        result = ParseResult()

        if not grid:
            result.add_error(0, 'CSV file is empty')
            return result

        headers = grid[0]
        validation = validate_required_headers(headers, self.required_headers)
        if not validation['valid']:
            result.add_error(0, 'Missing required headers: {}'.format(', '.join(validation['missing'])))
            return result

        # header is line 1 of the sheet
        for (row_number, row) in enumerate(grid[1:], start=2):
            result.total_rows += 1
            try:
                self.parse_row(headers, row, row_number, result)
            except Exception as e:
                logger.exception(f'row {row_number} could not be parsed')
                result.add_error(row_number, f'Parse error: {e}', failed=True)

        logger.info(
            f'{self.category}: {result.successful_rows} of {result.total_rows} rows parsed, '
            f'{len(result.errors)} errors, {len(result.warnings)} warnings')
        return result

    def parse_row(self, headers, row, row_number, result):
        def value(header):
            return get_value_by_header(headers, row, header)

        facility_code = value('Location') or ''
        project_title = value('Project') or ''
        if not facility_code or not project_title:
            result.add_error(row_number, 'Missing facility code or project title', failed=True)
            return

        priority = sanitize_integer(value('Priority'))
        estimated_cost = sanitize_currency(value('Estimated Cost'))
        notes = value('Notes') or None

        completion_year = None
        match = COMPLETION_YEAR.search(project_title + ' ' + (notes or ''))
        if match:
            completion_year = int(match.group(0))

        actual_cost = sanitize_currency(value('Actual Cost'))
        variance = sanitize_currency(value('Variance'))
        amounts = [estimated_cost, actual_cost, variance]
        if estimated_cost is not None and actual_cost is not None:
            amounts.append(calculate_variance(estimated_cost, actual_cost))
        if not all(fits_digits(amount, MONEY_DIGITS) for amount in amounts):
            result.add_error(row_number, 'Amount too large to store', failed=True)
            return

        row = ImportRow(
            import_key=generate_import_key_with_priority(
                self.category, facility_code, project_title, priority),
            category=self.category,
            priority=priority,
            facility_code=facility_code,
            project_title=project_title,
            jurisdiction=value('Jurisdiction') or None,
            estimated_cost=estimated_cost,
            funding_source=value('Funding Source') or None,
            actual_cost=actual_cost,
            variance=variance,
            notes=notes,
            links=value('Links') or None,
            completion_year=completion_year,
            row_number=row_number,
        )
        result.add_row(row)

        if estimated_cost is None:
            result.add_warning(row_number, 'Missing estimated cost')


def parse_small_works_csv(grid):
    return SmallWorksParser().parse(grid)


def row_to_project(row):
    """Fields for a Project built from a parsed row"""
    return {
        'import_key': row.import_key,
        'name': row.project_title,
        'category': row.category,
        'priority': row.priority,
        'jurisdiction': row.jurisdiction,
        'funding_source': row.funding_source,
        'estimated_cost': row.estimated_cost,
        'actual_cost': row.actual_cost,
        'variance': row.variance,
        'notes': row.notes,
        'links': row.links,
        'completion_year': row.completion_year,
    }


def row_to_estimate(row):
    """Estimate record for a parsed row, or None when the row has no cost"""
    if not row.estimated_cost:
        return None
    return {
        'import_key': row.import_key,
        'estimated_cost': row.estimated_cost,
        'estimate_type': 'SmallWorksEstimate',
        'notes': row.notes,
    }
