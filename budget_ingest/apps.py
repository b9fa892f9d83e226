from django.apps import AppConfig


class BudgetIngestConfig(AppConfig):
    name = 'budget_ingest'
    verbose_name = 'Capital project budgets'
    default_auto_field = 'django.db.models.AutoField'
