"""
Column lookup that tolerates how district spreadsheets spell their headers.

Headers are reduced to a canonical token, so "Juristiction",
"JURISDICTION " and "jurisdiction" all find the same column.
"""
import re
from collections import OrderedDict

# variant spelling -> canonical token
HEADER_ALIASES = {
    # jurisdiction typos
    'juristiction': 'jurisdiction',
    'jurisdication': 'jurisdiction',
    'juristriction': 'jurisdiction',

    'prior': 'priority',
    'pri': 'priority',
    '#': 'priority',
    'number': 'priority',

    'location': 'facility',
    'site': 'facility',
    'building': 'facility',
    'school': 'facility',

    'project name': 'project',
    'projectname': 'project',
    'description': 'project',
    'title': 'project',

    'estimated cost': 'estimate',
    'estimatedcost': 'estimate',
    'budget': 'estimate',
    'approved budget': 'approvedbudget',
    'total budget': 'approvedbudget',
    'base bid plus alts': 'basebid',
    'basebidplusalts': 'basebid',
    'base bid': 'basebid',

    'funding source': 'fundingsource',
    'fundingsource': 'fundingsource',
    'fund': 'fundingsource',
    'source': 'fundingsource',

    'actual cost': 'actualcost',
    'actualcost': 'actualcost',
    'actuals': 'actualcost',
    'spent': 'actualcost',

    'variance': 'variance',
    'difference': 'variance',
    'remaining': 'variance',

    'notes': 'notes',
    'comments': 'notes',
    'memo': 'notes',
    'remarks': 'notes',

    'links': 'links',
    'urls': 'links',
    'attachments': 'links',

    'completion': 'completion',
    'completion date': 'completion',
    'completiondate': 'completion',
    'date': 'completion',
    'estimated date': 'estimateddate',

    # energy efficiency sheets
    'funded?': 'funded',
    'funded': 'funded',
    'is funded': 'funded',
}


def normalize_header(header):
    """
    Map a header to its canonical token

    The lowercased, trimmed header is looked up first; failing that,
    parentheses, whitespace, underscores and hyphens are removed and it
    is looked up again.  An unknown header comes back in its cleaned form.
    """
    normalized = str(header if header is not None else '').strip().lower()
    if normalized in HEADER_ALIASES:
        return HEADER_ALIASES[normalized]

    cleaned = re.sub(r'[()\s_-]', '', normalized)
    return HEADER_ALIASES.get(cleaned, cleaned)


def normalize_headers(headers):
    return [normalize_header(h) for h in headers]


def create_header_map(headers):
    """canonical token -> column index; a repeated header resolves to its last column"""
    header_map = OrderedDict()
    for (index, header) in enumerate(headers):
        header_map[normalize_header(header)] = index
    return header_map


def find_column(headers, target_header):
    """Index of the column matching `target_header`, or None"""
    return create_header_map(headers).get(normalize_header(target_header))


def get_value_by_header(headers, row, target_header):
    """
    Trimmed cell text under `target_header`

    Returns None when the column is missing, the row is too short or
    the cell itself is None.
    """
    index = find_column(headers, target_header)
    if index is None or index >= len(row):
        return None

    value = row[index]
    if value is None:
        return None
    return str(value).strip()


def validate_required_headers(headers, required):
    """
    Check a header row for required columns

    :return: dict with `valid` (bool) and `missing` (the required names,
             as given, that have no matching column)
    """
    present = set(normalize_headers(headers))
    missing = [r for r in required if normalize_header(r) not in present]
    return {'valid': not missing, 'missing': missing}
