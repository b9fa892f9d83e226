import logging
from functools import lru_cache

import json_logic
import jsonschema

from . import utils

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _load(location):
    return utils.load_document(location)


class RuleValidator:
    """
    Advisory checks written as json-logic rules.

    The rule file (YAML or JSON) is a list of rules, each with

    - code: json-logic expression that is true when the values are acceptable
    - message: what to report when it is false
    - columns: (optional) the fields the rule looks at

    `check` never raises; a rule that cannot be evaluated is reported
    as a message of its own.
    """

    def __init__(self, location):
        self.location = location
        self.rules = _load(location) or []

    def evaluate(self, rule, values):
        return json_logic.jsonLogic(rule, values)

    def check(self, values):
        """
        :param values: dict of field name -> plain number (floats, ints)
        :return: list of messages for the rules that failed
        """
        messages = []
        for rule in self.rules:
            try:
                if not self.evaluate(rule['code'], values):
                    messages.append(rule.get('message', ''))
            except Exception as e:
                logger.exception(f'rule {rule.get("code")} could not be evaluated')
                messages.append(f'Unable to evaluate rule: {type(e).__name__}')
        return messages


class SchemaValidator:
    """Validate a whole JSON document against a JSON Schema."""

    def __init__(self, location):
        self.location = location
        self.schema = _load(location)

        # Find the correct version of the validator to use for this schema
        validator_class = jsonschema.validators.validator_for(self.schema)
        validator_class.check_schema(self.schema)
        self.validator = validator_class(self.schema)

    def errors(self, document):
        """
        :return: list of readable messages, empty when the document conforms
        """
        messages = []
        for error in sorted(self.validator.iter_errors(document), key=lambda e: [str(p) for p in e.path]):
            path = '/'.join(str(p) for p in error.path)
            messages.append(f'{path}: {error.message}' if path else error.message)
        return messages
