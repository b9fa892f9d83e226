import io
import json
import logging
import re

import requests
import tabulator
import yaml
from django.core import exceptions

logger = logging.getLogger('budget_ingest')

url_pattern = re.compile(r'^\w{3,5}://')


def load_document(location):
    """
    Load a YAML or JSON document (rules, schemas) from a path or URL

    :param location: filesystem path, or http(s) URL
    :return: parsed document
    """
    if url_pattern.search(location):
        resp = requests.get(location)
        if not resp.ok:
            raise exceptions.ImproperlyConfigured(
                '{} returned {}'.format(location, resp.status_code))
        if location.endswith('.yml') or location.endswith('.yaml'):
            return yaml.safe_load(resp.text)
        return resp.json()

    try:
        with open(location) as infile:
            if location.endswith('.yml') or location.endswith('.yaml'):
                return yaml.safe_load(infile)
            return json.load(infile)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise exceptions.ImproperlyConfigured(
            'could not load {}: {}'.format(location, e))


def _cell_text(value):
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        # spreadsheets hand back whole numbers as floats
        return str(int(value))
    return str(value)


def read_grid(raw, file_format='csv', **stream_args):
    """
    Read an uploaded sheet into a grid of strings

    :param raw: file contents as bytes
    :param file_format: tabulator format name, e.g. csv, xlsx, xls
    :return: list of rows, header row first, every cell a string
    """
    stream = tabulator.Stream(
        io.BytesIO(raw),
        format=file_format,
        encoding='utf-8',
        **stream_args)
    stream.open()
    try:
        grid = [[_cell_text(v) for v in row] for row in stream.iter()]
    finally:
        stream.close()
    logger.debug(f'read {len(grid)} rows of {file_format}')
    return grid


def to_grid(records):
    """Coerce a list of JSON objects to a grid
    [
        [All observed keys (headers)],
        [values],
        ...
    ]

    Headers are listed in the order they are first seen; missing keys
    become empty cells.
    """
    headers = []
    for record in records:
        for key in record.keys():
            if key not in headers:
                headers.append(key)

    grid = [headers]
    for record in records:
        grid.append([_cell_text(record.get(h)) for h in headers])
    return grid
