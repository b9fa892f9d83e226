from decimal import Decimal

from django.test import SimpleTestCase

from budget_ingest import calculations

STANDARD_INPUTS = {
    'approved_budget_total': 150000,
    'base_bid_plus_alts': 100000,
    'change_orders_total': 5000,
    'sales_tax_rate_percent': 10.6,
    'cpo_management_rate_percent': 10,
    'tech_misc': 5000,
    'consultants': 3000,
}


class TestComputeAllFields(SimpleTestCase):

    def test_standard_budget(self):
        result = calculations.compute_all_fields(STANDARD_INPUTS)
        self.assertEqual(result['sales_tax_amount'], Decimal('11130.00'))
        self.assertEqual(result['construction_cost_subtotal'], Decimal('116130.00'))
        self.assertEqual(result['cpo_management_amount'], Decimal('11613.00'))
        self.assertEqual(result['other_cost_subtotal'], Decimal('19613.00'))
        self.assertEqual(result['total_project_cost'], Decimal('135743.00'))
        self.assertEqual(result['remainder'], Decimal('14257.00'))

    def test_over_budget_remainder_is_negative(self):
        inputs = dict(STANDARD_INPUTS, approved_budget_total=100000)
        result = calculations.compute_all_fields(inputs)
        self.assertEqual(result['remainder'], Decimal('-35743.00'))

    def test_fields_in_chain_order(self):
        result = calculations.compute_all_fields(STANDARD_INPUTS)
        self.assertEqual(tuple(result.keys()), calculations.COMPUTED_FIELDS)

    def test_missing_inputs_count_as_zero(self):
        result = calculations.compute_all_fields({})
        for value in result.values():
            self.assertEqual(value, Decimal('0'))

        result = calculations.compute_all_fields({'base_bid_plus_alts': 1000, 'tech_misc': None})
        self.assertEqual(result['construction_cost_subtotal'], Decimal('1000.00'))
        self.assertEqual(result['total_project_cost'], Decimal('1000.00'))
        self.assertEqual(result['remainder'], Decimal('-1000.00'))

    def test_each_step_is_rounded(self):
        inputs = {
            'base_bid_plus_alts': 100000,
            'change_orders_total': 5000,
            'sales_tax_rate_percent': 10.65,
            'cpo_management_rate_percent': 3,
            'tech_misc': 2000,
            'consultants': 3000,
            'approved_budget_total': 150000,
        }
        result = calculations.compute_all_fields(inputs)
        self.assertEqual(result['sales_tax_amount'], Decimal('11182.50'))
        # 116182.50 x 3% = 3485.475
        self.assertEqual(result['cpo_management_amount'], Decimal('3485.48'))
        self.assertEqual(result['total_project_cost'], Decimal('124667.98'))
        self.assertEqual(result['remainder'], Decimal('25332.02'))

    def test_deterministic(self):
        self.assertEqual(
            calculations.compute_all_fields(STANDARD_INPUTS),
            calculations.compute_all_fields(dict(STANDARD_INPUTS)))

    def test_chain_consistency(self):
        for rate in ('0', '7.125', '10.65', '33.3'):
            inputs = dict(STANDARD_INPUTS, sales_tax_rate_percent=rate, cpo_management_rate_percent=rate)
            result = calculations.compute_all_fields(inputs)
            self.assertEqual(
                result['total_project_cost'],
                calculations.round2(result['construction_cost_subtotal'] + result['other_cost_subtotal']))
            self.assertEqual(
                result['remainder'],
                calculations.round2(Decimal(150000) - result['total_project_cost']))

    def test_large_credit_is_not_clamped(self):
        inputs = {'base_bid_plus_alts': 1000, 'change_orders_total': -5000, 'sales_tax_rate_percent': 10}
        result = calculations.compute_all_fields(inputs)
        self.assertEqual(result['sales_tax_amount'], Decimal('-400.00'))
        self.assertEqual(result['construction_cost_subtotal'], Decimal('-4400.00'))

    def test_accepts_strings_and_decimals(self):
        inputs = {k: str(v) for (k, v) in STANDARD_INPUTS.items()}
        self.assertEqual(
            calculations.compute_all_fields(inputs),
            calculations.compute_all_fields(STANDARD_INPUTS))

    def test_huge_amounts_do_not_raise(self):
        result = calculations.compute_all_fields({'base_bid_plus_alts': 1e30, 'sales_tax_rate_percent': 10})
        self.assertEqual(result['sales_tax_amount'], Decimal('100000000000000000000000000000.00'))
        self.assertEqual(result['construction_cost_subtotal'], Decimal('1100000000000000000000000000000.00'))
        self.assertEqual(result['remainder'], -result['total_project_cost'])

    def test_non_finite_inputs_count_as_zero(self):
        self.assertEqual(calculations.round2(Decimal('Infinity')), Decimal('0.00'))
        self.assertEqual(calculations.round2(float('nan')), Decimal('0.00'))
        result = calculations.compute_all_fields({'base_bid_plus_alts': float('inf'), 'tech_misc': 100})
        self.assertEqual(result['total_project_cost'], Decimal('100.00'))


class TestChainFunctions(SimpleTestCase):

    def test_round2_half_away_from_zero(self):
        self.assertEqual(calculations.round2('0.125'), Decimal('0.13'))
        self.assertEqual(calculations.round2('-0.125'), Decimal('-0.13'))
        self.assertEqual(calculations.round2(None), Decimal('0.00'))

    def test_to_decimal_uses_float_repr(self):
        self.assertEqual(calculations.to_decimal(10.65), Decimal('10.65'))

    def test_sales_tax_amount(self):
        self.assertEqual(
            calculations.calculate_sales_tax_amount(100000, 5000, 10.6), Decimal('11130.00'))
        self.assertEqual(calculations.calculate_sales_tax_amount(100000, None, None), Decimal('0.00'))

    def test_half_cent_boundary(self):
        self.assertEqual(calculations.calculate_sales_tax_amount(100, 0, 10.65), Decimal('10.65'))
        self.assertEqual(calculations.calculate_sales_tax_amount(1, 0, 0.5), Decimal('0.01'))

    def test_negative_change_orders_are_credits(self):
        self.assertEqual(
            calculations.calculate_construction_cost_subtotal(100000, -2500, 0), Decimal('97500.00'))

    def test_variance(self):
        self.assertEqual(calculations.calculate_variance(50000, 42500), Decimal('7500.00'))
        self.assertEqual(calculations.calculate_variance(None, 1000), Decimal('-1000.00'))

    def test_percent_spent(self):
        self.assertEqual(calculations.calculate_percent_spent(135743, 150000), Decimal('90.50'))
        self.assertEqual(calculations.calculate_percent_spent(1000, 0), Decimal('0.00'))
        self.assertEqual(calculations.calculate_percent_spent(1000, None), Decimal('0.00'))

    def test_round2_beyond_cents_precision(self):
        self.assertEqual(calculations.round2(Decimal('1e100')), Decimal('1e100'))
        self.assertEqual(calculations.round2(Decimal('-1e100')), Decimal('-1e100'))

    def test_percent_spent_of_tiny_budget(self):
        self.assertEqual(calculations.calculate_percent_spent(1000, Decimal('1e-40')), Decimal('1e45'))


class TestValidateInputs(SimpleTestCase):

    def test_valid_inputs(self):
        self.assertEqual(calculations.validate_inputs(STANDARD_INPUTS), [])

    def test_missing_inputs_are_valid(self):
        self.assertEqual(calculations.validate_inputs({}), [])

    def test_all_failures_reported(self):
        inputs = {
            'base_bid_plus_alts': -100000,
            'sales_tax_rate_percent': -5,
            'cpo_management_rate_percent': 60,
        }
        errors = calculations.validate_inputs(inputs)
        self.assertEqual(len(errors), 3)
        self.assertIn('Base Bid Plus Alts cannot be negative', errors)
        self.assertIn('Sales Tax Rate must be between 0% and 50%', errors)
        self.assertIn('CPO Management Rate must be between 0% and 50%', errors)

    def test_bounds_are_inclusive(self):
        inputs = {'sales_tax_rate_percent': 50, 'cpo_management_rate_percent': 0}
        self.assertEqual(calculations.validate_inputs(inputs), [])

    def test_negative_approved_budget(self):
        self.assertEqual(
            calculations.validate_inputs({'approved_budget_total': Decimal('-1')}),
            ['Approved Budget Total cannot be negative'])


class TestColumnSizes(SimpleTestCase):

    def test_fits_digits(self):
        self.assertTrue(calculations.fits_digits(None, calculations.MONEY_DIGITS))
        self.assertTrue(calculations.fits_digits(Decimal('999999999999.99'), calculations.MONEY_DIGITS))
        self.assertTrue(calculations.fits_digits(Decimal('-999999999999.99'), calculations.MONEY_DIGITS))
        self.assertFalse(calculations.fits_digits(Decimal('999999999999.995'), calculations.MONEY_DIGITS))
        self.assertFalse(calculations.fits_digits(Decimal('1e13'), calculations.MONEY_DIGITS))
        self.assertFalse(calculations.fits_digits(Decimal('1e100'), calculations.MONEY_DIGITS))
        self.assertTrue(calculations.fits_digits(Decimal('999.999'), calculations.RATE_DIGITS))
        self.assertFalse(calculations.fits_digits(Decimal('1234'), calculations.RATE_DIGITS))

    def test_oversized_fields(self):
        values = {
            'base_bid_plus_alts': Decimal('1e13'),
            'sales_tax_rate_percent': Decimal('1234'),
            'cpo_management_rate_percent': Decimal('10'),
            'tech_misc': None,
            'as_of_date': '2024-06-30',
        }
        self.assertEqual(
            calculations.oversized_fields(values), ['base_bid_plus_alts', 'sales_tax_rate_percent'])
        self.assertEqual(calculations.oversized_fields(STANDARD_INPUTS), [])
