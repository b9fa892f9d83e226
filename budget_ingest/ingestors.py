import logging
from collections import OrderedDict

from django.db import transaction

from .calculations import INPUT_FIELDS
from .importers.small_works import row_to_estimate, row_to_project
from .models import Attachment, Facility, Project, ProjectBudget, ProjectEstimate

logger = logging.getLogger(__name__)


class Ingestor:
    """
    Writes importer output to the database.

    Every write is an upsert keyed by natural identity (facility code,
    project import key, ...), so importing the same source twice
    updates rather than duplicates.  Each import runs in one transaction.
    """

    SECTIONS = ('facilities', 'projects', 'budgets', 'estimates', 'attachments')

    def __init__(self):
        self.summary = OrderedDict(
            (section, {'created': 0, 'updated': 0}) for section in self.SECTIONS)

    def count(self, section, created):
        self.summary[section]['created' if created else 'updated'] += 1

    @transaction.atomic
    def insert_rows(self, rows):
        """
        Upsert parsed sheet rows (`ImportRow`s) as projects

        Unknown facility codes are created with the code as their name.
        """
        for row in rows:
            (facility, created) = Facility.objects.get_or_create(
                code=row.facility_code,
                defaults={'name': row.facility_code, 'jurisdiction': row.jurisdiction},
            )
            if created:
                self.count('facilities', created)

            fields = row_to_project(row)
            import_key = fields.pop('import_key')
            fields['facility'] = facility
            (project, created) = Project.objects.update_or_create(import_key=import_key, defaults=fields)
            self.count('projects', created)

            estimate = row_to_estimate(row)
            if estimate:
                (_, created) = ProjectEstimate.objects.update_or_create(
                    project=project,
                    estimate_type=estimate['estimate_type'],
                    defaults={'estimated_cost': estimate['estimated_cost'], 'notes': estimate['notes']},
                )
                self.count('estimates', created)

        logger.info(f'inserted rows: {dict(self.summary)}')
        return self.summary

    @transaction.atomic
    def insert_bundle(self, result):
        """Upsert the records of a `BundleResult`"""
        records = result.records

        for f in records['facilities']:
            (_, created) = Facility.objects.update_or_create(
                code=f['code'],
                defaults={
                    'name': f['name'],
                    'jurisdiction': f['jurisdiction'],
                    'facility_type': f['type'],
                    'region': f['region'],
                    'tax_rate_percent': f['tax_rate_percent'],
                },
            )
            self.count('facilities', created)

        projects = {}
        for p in records['projects']:
            fields = dict(p)
            import_key = fields.pop('import_key')
            fields['facility'] = Facility.objects.get(code=fields.pop('facility_code'))
            (projects[import_key], created) = Project.objects.update_or_create(
                import_key=import_key, defaults=fields)
            self.count('projects', created)

        for b in records['budgets']:
            # derived fields are recomputed by ProjectBudget.save
            fields = {field: b[field] for field in INPUT_FIELDS}
            fields['as_of_date'] = b['as_of_date']
            (_, created) = ProjectBudget.objects.update_or_create(
                project=projects[b['project_import_key']], defaults=fields)
            self.count('budgets', created)

        for e in records['estimates']:
            (_, created) = ProjectEstimate.objects.update_or_create(
                project=projects[e['project_import_key']],
                estimate_type=e['estimate_type'],
                defaults={
                    'estimated_cost': e['estimated_cost'] or 0,
                    'as_of_date': e['as_of_date'],
                    'notes': e['notes'],
                },
            )
            self.count('estimates', created)

        for a in records['attachments']:
            (_, created) = Attachment.objects.update_or_create(
                project=projects[a['project_import_key']],
                url=a['url'],
                defaults={
                    'file_name': a['file_name'],
                    'file_size': a['file_size'],
                    'file_type': a['file_type'],
                },
            )
            self.count('attachments', created)

        logger.info(f'inserted bundle: {dict(self.summary)}')
        return self.summary
