from collections import OrderedDict
from decimal import Decimal


class ParseResult:
    """
    Standard output of an importer.  Importers add rows, errors and
    warnings as they go; `get_output` renders the JSON-safe summary that
    the API returns.

    A row is counted as failed when `add_error` is called with
    `failed=True`; rows passed to `add_row` are counted as successful.
    """

    def __init__(self):
        self.data = []
        self.errors = []
        self.warnings = []
        self.total_rows = 0
        self.successful_rows = 0
        self.failed_rows = 0
        self.total_estimated_cost = Decimal('0')
        self.total_actual_cost = Decimal('0')
        self.facilities_found = set()

    @staticmethod
    def create_message(row_number, message):
        """
        Create standardized error/warning dictionary

        Parameters:
        row_number - spreadsheet line the message applies to, 0 for the whole file
        message - what went wrong

        Returns:
        Dictionary with the following items: row, message
        """
        return {'row': row_number, 'message': message}

    def add_error(self, row_number, message, failed=False):
        self.errors.append(self.create_message(row_number, message))
        if failed:
            self.failed_rows += 1

    def add_warning(self, row_number, message):
        self.warnings.append(self.create_message(row_number, message))

    def add_row(self, row):
        """
        Record a successfully parsed row and fold it into the running totals
        """
        self.data.append(row)
        self.successful_rows += 1
        self.facilities_found.add(row.facility_code)
        if row.estimated_cost:
            self.total_estimated_cost += row.estimated_cost
        if row.actual_cost:
            self.total_actual_cost += row.actual_cost

    @property
    def success(self):
        return not self.errors

    @property
    def summary(self):
        return {
            'total_rows': self.total_rows,
            'successful_rows': self.successful_rows,
            'failed_rows': self.failed_rows,
            'total_estimated_cost': self.total_estimated_cost,
            'total_actual_cost': self.total_actual_cost,
            'facilities_found': sorted(self.facilities_found),
        }

    def get_output(self):
        """
        Returns:
        A dictionary with the following items:
        - success - True when no errors were recorded
        - data - a list of row dictionaries
        - errors, warnings - lists of {row, message}
        - summary - row counts, cost totals and facility codes seen
        """
        return {
            'success': self.success,
            'data': [row._asdict() for row in self.data],
            'errors': self.errors,
            'warnings': self.warnings,
            'summary': self.summary,
        }


class BundleResult:
    """
    Output of the JSON bundle importer: accepted records per section,
    plus errors and warnings tagged with the section and 1-based item
    number they came from (row 0 for the whole bundle).
    """

    SECTIONS = ('facilities', 'projects', 'budgets', 'estimates', 'attachments')

    def __init__(self):
        self.records = OrderedDict((section, []) for section in self.SECTIONS)
        self.skipped = OrderedDict((section, 0) for section in self.SECTIONS)
        self.errors = []
        self.warnings = []

    @staticmethod
    def create_message(section, row_number, message):
        return {'section': section, 'row': row_number, 'message': message}

    def add_error(self, section, row_number, message):
        self.errors.append(self.create_message(section, row_number, message))

    def add_warning(self, section, row_number, message):
        self.warnings.append(self.create_message(section, row_number, message))

    def skip(self, section, row_number, message):
        self.add_warning(section, row_number, message)
        self.skipped[section] += 1

    def add_record(self, section, record):
        self.records[section].append(record)

    @property
    def success(self):
        return not self.errors

    @property
    def summary(self):
        return OrderedDict(
            (section, {'accepted': len(self.records[section]), 'skipped': self.skipped[section]})
            for section in self.SECTIONS)

    def get_output(self):
        output = OrderedDict([('success', self.success)])
        output.update(self.records)
        output['errors'] = self.errors
        output['warnings'] = self.warnings
        output['summary'] = self.summary
        return output
