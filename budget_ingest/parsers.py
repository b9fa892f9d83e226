from rest_framework import parsers

from .ingest_settings import BUDGET_SETTINGS
from .utils import read_grid


class CsvParser(parsers.BaseParser):
    """
    CSV parser.
    """
    media_type = 'text/csv'
    file_format = 'csv'

    def parse(self, stream, media_type=None, parser_context=None):
        """
        Given a streamed sheet, return its grid of strings, header row first
        """
        return read_grid(stream.read(), self.file_format, **BUDGET_SETTINGS['STREAM_ARGS'])


class XlsxParser(CsvParser):
    media_type = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    file_format = 'xlsx'
