import json
import os
import threading

import jsonschema

SCHEMA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "schemas")
DEFAULT_RECORD_SCHEMA = os.path.join(SCHEMA_DIR, "log_record.json")
DEFAULT_FILTER_SCHEMA = os.path.join(SCHEMA_DIR, "filter_set.json")


def _load_validator(schema_path):
    with open(schema_path, "r") as f:
        schema = json.load(f)
    return jsonschema.Draft202012Validator(schema)


class PayloadValidator:
    """Validates ingest and query request bodies against JSON schemas."""

    def __init__(self, record_schema_path=None, filter_schema_path=None):
        self._record_validator = _load_validator(record_schema_path or DEFAULT_RECORD_SCHEMA)
        self._filter_validator = _load_validator(filter_schema_path or DEFAULT_FILTER_SCHEMA)
        self._lock = threading.Lock()
        self._stats = {"total": 0, "valid": 0, "invalid": 0}

    def validate_record(self, body):
        """Validate an ingest body.

        Returns:
            tuple: (is_valid: bool, errors: list[str])
        """
        return self._validate(self._record_validator, body)

    def validate_filters(self, body):
        """Validate a query body; every value must be a string."""
        return self._validate(self._filter_validator, body)

    def _validate(self, validator, body):
        errors = [error.message for error in validator.iter_errors(body)]
        with self._lock:
            self._stats["total"] += 1
            if errors:
                self._stats["invalid"] += 1
            else:
                self._stats["valid"] += 1
        return not errors, errors

    def get_stats(self):
        """Return a copy of the stats dict."""
        with self._lock:
            return dict(self._stats)
