"""Flask HTTP interface: POST /ingest, POST /query, GET /health."""

import logging
import os

from flask import Flask, jsonify, request
from werkzeug.exceptions import BadRequest

from log_ingestor.config import Config
from log_ingestor.filters import recognised_keys
from log_ingestor.models import LogRecord
from log_ingestor.store import LogStore
from log_ingestor.validator import PayloadValidator

logger = logging.getLogger(__name__)


def _bad_request(message, errors=None):
    logger.warning("Rejected request to %s: %s", request.path, message)
    return jsonify({"status": "error", "error": message, "errors": errors or []}), 400


def _read_json():
    """Decode the request body, which may be any JSON value including null.

    Returns:
        tuple: (decoded: bool, body)
    """
    try:
        return True, request.get_json(force=True)
    except BadRequest:
        return False, None


def create_app(config=None, store=None, validator=None) -> Flask:
    """Flask application factory.

    The store is owned by the caller when one is passed in, so tests and the
    server can share it with the app.
    """
    app = Flask(__name__)
    # Keep record fields in their declared order
    app.json.sort_keys = False

    if config is None:
        config = Config(os.environ.get("CONFIG_PATH", "config.yaml"))
    if store is None:
        store = LogStore()
    if validator is None:
        validator = PayloadValidator(
            config["schema"]["record_path"],
            config["schema"]["filter_path"],
        )

    app.debug = config["server"]["debug"]

    app.config["components"] = {
        "config": config,
        "store": store,
        "validator": validator,
    }

    @app.route("/ingest", methods=["POST"])
    def ingest():
        logger.debug("Ingest called")
        decoded, body = _read_json()
        if not decoded:
            return _bad_request("Error decoding JSON")

        is_valid, errors = validator.validate_record(body)
        if not is_valid:
            return _bad_request("Invalid log record", errors)

        try:
            record = LogRecord.from_dict(body or {})
        except ValueError as e:
            return _bad_request(str(e))

        store.ingest(record)
        return "", 200

    @app.route("/query", methods=["POST"])
    def query():
        decoded, body = _read_json()
        if not decoded:
            return _bad_request("Error decoding JSON")

        is_valid, errors = validator.validate_filters(body)
        if not is_valid:
            return _bad_request("Invalid filter set", errors)

        # A null filter value compares as the empty string
        filters = {key: value or "" for key, value in (body or {}).items()}
        results = store.query(filters)
        logger.debug(
            "Query called with %d filter(s) (%d recognised), matched %d",
            len(filters), len(recognised_keys(filters)), len(results),
        )
        return jsonify([r.to_dict() for r in results])

    @app.route("/health")
    def health():
        return jsonify({
            "status": "ok",
            "total_logs": store.count,
            "validation_stats": validator.get_stats(),
        })

    return app
