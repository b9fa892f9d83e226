from django.db import models

from . import calculations

(MONEY_MAX_DIGITS, MONEY_PLACES) = calculations.MONEY_DIGITS
(RATE_MAX_DIGITS, RATE_PLACES) = calculations.RATE_DIGITS

MONEY = dict(max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_PLACES, null=True, blank=True)
RATE = dict(max_digits=RATE_MAX_DIGITS, decimal_places=RATE_PLACES, null=True, blank=True)
COMPUTED = dict(max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_PLACES, default=0, editable=False)


class Facility(models.Model):
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    jurisdiction = models.CharField(max_length=100, null=True, blank=True)
    facility_type = models.CharField(max_length=20, default='SCHOOL')
    region = models.CharField(max_length=100, null=True, blank=True)
    # applies to budgets that leave their own sales tax rate blank
    tax_rate_percent = models.DecimalField(**RATE)

    class Meta:
        verbose_name_plural = 'facilities'

    def __str__(self):
        return self.code


class Project(models.Model):
    """
    A capital project.  `import_key` identifies the project across
    repeated imports of the same source sheet.
    """
    import_key = models.CharField(max_length=64, unique=True)
    facility = models.ForeignKey(Facility, on_delete=models.PROTECT, related_name='projects')
    name = models.CharField(max_length=300)
    category = models.CharField(max_length=100, null=True, blank=True)
    priority = models.IntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, default='ACTIVE')
    jurisdiction = models.CharField(max_length=100, null=True, blank=True)
    funding_source = models.CharField(max_length=200, null=True, blank=True)
    estimated_cost = models.DecimalField(**MONEY)
    actual_cost = models.DecimalField(**MONEY)
    variance = models.DecimalField(**MONEY)
    notes = models.TextField(null=True, blank=True)
    links = models.TextField(null=True, blank=True)
    completion_year = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.variance is None and self.estimated_cost is not None and self.actual_cost is not None:
            self.variance = calculations.calculate_variance(self.estimated_cost, self.actual_cost)
        return super().save(*args, **kwargs)


class ProjectBudget(models.Model):
    """
    Budget inputs for a project and the figures derived from them.

    The derived fields are never set directly: every save recomputes
    the whole chain from the inputs.
    """
    project = models.OneToOneField(Project, on_delete=models.CASCADE, related_name='budget')
    as_of_date = models.DateField(null=True, blank=True)

    approved_budget_total = models.DecimalField(**MONEY)
    base_bid_plus_alts = models.DecimalField(**MONEY)
    change_orders_total = models.DecimalField(**MONEY)
    sales_tax_rate_percent = models.DecimalField(**RATE)
    cpo_management_rate_percent = models.DecimalField(**RATE)
    tech_misc = models.DecimalField(**MONEY)
    consultants = models.DecimalField(**MONEY)

    sales_tax_amount = models.DecimalField(**COMPUTED)
    construction_cost_subtotal = models.DecimalField(**COMPUTED)
    cpo_management_amount = models.DecimalField(**COMPUTED)
    other_cost_subtotal = models.DecimalField(**COMPUTED)
    total_project_cost = models.DecimalField(**COMPUTED)
    remainder = models.DecimalField(**COMPUTED)

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'Budget for {self.project}'

    def inputs(self):
        return {field: getattr(self, field) for field in calculations.INPUT_FIELDS}

    def recompute(self):
        for (field, value) in calculations.compute_all_fields(self.inputs()).items():
            setattr(self, field, value)

    def validation_errors(self):
        return calculations.validate_inputs(self.inputs())

    @property
    def percent_spent(self):
        return calculations.calculate_percent_spent(self.total_project_cost, self.approved_budget_total)

    def save(self, *args, **kwargs):
        self.recompute()
        return super().save(*args, **kwargs)


class ProjectEstimate(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='estimates')
    estimate_type = models.CharField(max_length=50)
    estimated_cost = models.DecimalField(max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_PLACES, default=0)
    as_of_date = models.DateField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        unique_together = ('project', 'estimate_type')


class Attachment(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='attachments')
    url = models.URLField(max_length=500)
    file_name = models.CharField(max_length=255)
    file_size = models.IntegerField(null=True, blank=True)
    file_type = models.CharField(max_length=50, null=True, blank=True)

    class Meta:
        unique_together = ('project', 'url')
