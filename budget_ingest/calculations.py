"""
Project budget derivation.

The derived fields follow the district-wide budget spreadsheet, in this
order, rounding to the cent after every step:

    sales tax         = (base bid + alts + change orders) x tax rate / 100
    construction      = base bid + alts + change orders + sales tax
    CPO management    = construction x CPO management rate / 100
    other costs       = CPO management + tech/misc + consultants
    total project     = construction + other costs
    remainder         = approved budget - total project

Rounding each intermediate (half away from zero) is what keeps the last
cent identical to the spreadsheet, so it must not be deferred to the end.

Missing and non-finite inputs count as zero.  Nothing here raises for
numeric or None input, however large; amounts too large to carry cents
at 60 significant digits come back unrounded.  `validate_inputs`
reports suspicious values separately.
"""
import functools
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP, Context, localcontext, MAX_EMAX, MIN_EMIN

from .ingest_settings import BUDGET_SETTINGS
from .validators import RuleValidator

# Two-decimal quantizer for money rounding
_TWO_PLACES = Decimal('0.01')
_HUNDRED = Decimal('100')

# money arithmetic: 60 significant digits, nothing traps
_MONEY_CONTEXT = Context(prec=60, rounding=ROUND_HALF_UP, Emax=MAX_EMAX, Emin=MIN_EMIN, traps=[])

# (max_digits, decimal_places) of stored amounts and rates
MONEY_DIGITS = (14, 2)
RATE_DIGITS = (6, 3)

RATE_FIELDS = ('sales_tax_rate_percent', 'cpo_management_rate_percent')

INPUT_FIELDS = (
    'approved_budget_total',
    'base_bid_plus_alts',
    'change_orders_total',
    'sales_tax_rate_percent',
    'cpo_management_rate_percent',
    'tech_misc',
    'consultants',
)

# in chain order
COMPUTED_FIELDS = (
    'sales_tax_amount',
    'construction_cost_subtotal',
    'cpo_management_amount',
    'other_cost_subtotal',
    'total_project_cost',
    'remainder',
)


def to_decimal(value):
    """None, NaN and infinities -> 0; floats go through their shortest repr so 10.65 stays 10.65"""
    if value is None:
        return Decimal('0')
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value if value.is_finite() else Decimal('0')


def money_context(func):
    """Run `func` under the wide, non-trapping money context"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with localcontext(_MONEY_CONTEXT):
            return func(*args, **kwargs)
    return wrapper


@money_context
def round2(value):
    """Round to cents, halves away from zero"""
    value = to_decimal(value)
    rounded = value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    if rounded.is_nan():
        # too many digits to carry cents: left unrounded
        return +value
    return rounded


def fits_digits(value, digits):
    """
    Whether `value` can be stored in a decimal column

    :param digits: (max_digits, decimal_places), e.g. MONEY_DIGITS
    :return: True for None and for values that fit once rounded to the column
    """
    if value is None:
        return True
    (max_digits, places) = digits
    with localcontext(_MONEY_CONTEXT):
        rounded = to_decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
        return not rounded.is_nan() and rounded.copy_abs() < Decimal(10) ** (max_digits - places)


@money_context
def calculate_sales_tax_amount(base_bid_plus_alts, change_orders_total, sales_tax_rate_percent):
    taxable = to_decimal(base_bid_plus_alts) + to_decimal(change_orders_total)
    return round2(taxable * to_decimal(sales_tax_rate_percent) / _HUNDRED)


@money_context
def calculate_construction_cost_subtotal(base_bid_plus_alts, change_orders_total, sales_tax_amount):
    return round2(
        to_decimal(base_bid_plus_alts) + to_decimal(change_orders_total) + to_decimal(sales_tax_amount))


@money_context
def calculate_cpo_management_amount(construction_cost_subtotal, cpo_management_rate_percent):
    return round2(
        to_decimal(construction_cost_subtotal) * to_decimal(cpo_management_rate_percent) / _HUNDRED)


@money_context
def calculate_other_cost_subtotal(cpo_management_amount, tech_misc, consultants):
    return round2(to_decimal(cpo_management_amount) + to_decimal(tech_misc) + to_decimal(consultants))


@money_context
def calculate_total_project_cost(construction_cost_subtotal, other_cost_subtotal):
    return round2(to_decimal(construction_cost_subtotal) + to_decimal(other_cost_subtotal))


@money_context
def calculate_remainder(approved_budget_total, total_project_cost):
    """Positive when under budget, negative when over"""
    return round2(to_decimal(approved_budget_total) - to_decimal(total_project_cost))


@money_context
def calculate_variance(estimated_cost, actual_cost):
    """Positive when a project came in under its estimate"""
    return round2(to_decimal(estimated_cost) - to_decimal(actual_cost))


@money_context
def calculate_percent_spent(total_project_cost, approved_budget_total):
    approved = to_decimal(approved_budget_total)
    if approved == 0:
        return round2(0)
    return round2(to_decimal(total_project_cost) / approved * _HUNDRED)


def compute_all_fields(inputs):
    """
    Run the full chain

    :param inputs: mapping with any of INPUT_FIELDS; missing keys count as 0
    :return: OrderedDict of COMPUTED_FIELDS, each a Decimal rounded to cents
    """
    get = inputs.get

    sales_tax_amount = calculate_sales_tax_amount(
        get('base_bid_plus_alts'), get('change_orders_total'), get('sales_tax_rate_percent'))

    construction_cost_subtotal = calculate_construction_cost_subtotal(
        get('base_bid_plus_alts'), get('change_orders_total'), sales_tax_amount)

    cpo_management_amount = calculate_cpo_management_amount(
        construction_cost_subtotal, get('cpo_management_rate_percent'))

    other_cost_subtotal = calculate_other_cost_subtotal(
        cpo_management_amount, get('tech_misc'), get('consultants'))

    total_project_cost = calculate_total_project_cost(construction_cost_subtotal, other_cost_subtotal)

    remainder = calculate_remainder(get('approved_budget_total'), total_project_cost)

    return OrderedDict([
        ('sales_tax_amount', sales_tax_amount),
        ('construction_cost_subtotal', construction_cost_subtotal),
        ('cpo_management_amount', cpo_management_amount),
        ('other_cost_subtotal', other_cost_subtotal),
        ('total_project_cost', total_project_cost),
        ('remainder', remainder),
    ])


def oversized_fields(values):
    """Names of the budget fields in `values` too large for their columns"""
    return [
        field for (field, value) in values.items()
        if field in INPUT_FIELDS + COMPUTED_FIELDS
        and not fits_digits(value, RATE_DIGITS if field in RATE_FIELDS else MONEY_DIGITS)
    ]


def validate_inputs(inputs, rules=None):
    """
    Advisory checks on budget inputs

    :param inputs: mapping with any of INPUT_FIELDS
    :param rules: rule file location, defaults to BUDGET_INGEST['BUDGET_RULES']
    :return: list of messages, empty when nothing looks wrong
    """
    validator = RuleValidator(rules or BUDGET_SETTINGS['BUDGET_RULES'])
    values = {field: float(to_decimal(inputs.get(field))) for field in INPUT_FIELDS}
    return validator.check(values)
