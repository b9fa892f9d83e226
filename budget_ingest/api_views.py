import logging

from django.utils.module_loading import import_string
from django.views.decorators.csrf import csrf_exempt
from rest_framework import decorators, response, status, viewsets
from rest_framework.parsers import JSONParser

from . import calculations
from .importers import load_bundle, parse_small_works_csv
from .ingest_settings import BUDGET_SETTINGS
from .models import Facility, ProjectBudget
from .parsers import CsvParser, XlsxParser
from .sanitizers import sanitize_currency, sanitize_percentage
from .serializers import ProjectBudgetSerializer
from .utils import to_grid

logger = logging.getLogger('budget_ingest')

RATE_FIELDS = ('sales_tax_rate_percent', 'cpo_management_rate_percent')


def get_ingestor():
    return import_string(BUDGET_SETTINGS['INGESTOR'])()


def wants_insert(request):
    return request.query_params.get('insert', '').lower() in ('1', 'true', 'yes')


class ProjectBudgetViewSet(viewsets.ModelViewSet):
    """
    Implements a REST API around `ProjectBudget`.  The derived fields
    are read only and recomputed on every save.
    """

    queryset = ProjectBudget.objects.select_related('project').order_by('project__priority', 'id')
    serializer_class = ProjectBudgetSerializer


@csrf_exempt
@decorators.api_view(['POST'])
@decorators.parser_classes((JSONParser, ))
def compute(request):
    """
    Derive budget figures without saving anything

    :param request: HTTP request
    :return: JSON with the sanitized inputs, the derived fields,
             percent spent and advisory warnings

    Accepts a JSON object with any of the budget input fields.  Amounts
    may be numbers or spreadsheet text ("$1,234.56", "10.6%").
    """
    if not isinstance(request.data, dict):
        message = {'error': 'expected a JSON object of budget inputs'}
        return response.Response(message, status=status.HTTP_400_BAD_REQUEST)

    inputs = {}
    for field in calculations.INPUT_FIELDS:
        sanitize = sanitize_percentage if field in RATE_FIELDS else sanitize_currency
        inputs[field] = sanitize(request.data.get(field))

    computed = calculations.compute_all_fields(inputs)
    result = {
        'inputs': inputs,
        'computed': computed,
        'percent_spent': calculations.calculate_percent_spent(
            computed['total_project_cost'], inputs['approved_budget_total']),
        'warnings': calculations.validate_inputs(inputs),
    }
    return response.Response(result)


@csrf_exempt
@decorators.api_view(['POST'])
@decorators.parser_classes((JSONParser, CsvParser, XlsxParser))
def import_small_works(request):
    """
    Parse a Small Works sheet and, with ?insert=true, upsert its projects

    Accepts Content-Types: "text/csv", xlsx OR "application/json"

    JSON data must be an array of rows (arrays of cells, header row
    first) or an array of objects whose keys are the column headers.

    Nothing is inserted unless the whole sheet parses without errors;
    a sheet with errors is answered with 400 and the parse result.
    """
    grid = request.data
    if isinstance(grid, list) and grid and all(isinstance(row, dict) for row in grid):
        grid = to_grid(grid)
    if not isinstance(grid, list) or not all(isinstance(row, list) for row in grid):
        message = {'error': 'unexpected input'}
        return response.Response(message, status=status.HTTP_400_BAD_REQUEST)

    result = parse_small_works_csv(grid)
    output = result.get_output()
    if not result.success:
        return response.Response(output, status=status.HTTP_400_BAD_REQUEST)

    if wants_insert(request):
        output['inserted'] = get_ingestor().insert_rows(result.data)
    return response.Response(output)


@csrf_exempt
@decorators.api_view(['POST'])
@decorators.parser_classes((JSONParser, ))
def import_bundle(request):
    """
    Check a JSON import bundle and, with ?insert=true, upsert its records

    Projects may refer to facilities in the bundle or already in the
    database.  Skipped records are reported as warnings; a bundle that
    does not match the schema is answered with 400.
    """
    if not isinstance(request.data, dict):
        message = {'error': 'expected a JSON object'}
        return response.Response(message, status=status.HTTP_400_BAD_REQUEST)

    known = dict(Facility.objects.values_list('code', 'tax_rate_percent'))
    result = load_bundle(request.data, known_facility_codes=known)
    output = result.get_output()
    if not result.success:
        return response.Response(output, status=status.HTTP_400_BAD_REQUEST)

    if wants_insert(request):
        output['inserted'] = get_ingestor().insert_bundle(result)
    return response.Response(output)
