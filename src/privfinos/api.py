"""
PrivFinOS - Flask REST API

This module provides the RESTful API for the PrivFinOS personal finance
application. It serves endpoints for:

Categories:
- Income/expense categories with optional parent category (CRUD)
- Soft delete (deactivate) and permanent delete

Accounts:
- Account management (CRUD, soft and permanent delete)
- Single account balance and total balance across active accounts

Transactions:
- Income, expense and transfer records with filtering and paging

Every response uses the same envelope:
    {"success": true, "data": ...}
    {"success": false, "error": {"message": ..., "code": ...}}

Request bodies, query strings and path ids are validated with the pydantic
schemas in privfinos.schemas before a handler runs.

License: MIT
"""

import atexit
import datetime
import json
import os
import time
from decimal import Decimal
from functools import wraps
from pathlib import Path

from flask import Blueprint, Flask, current_app, g, jsonify, request, send_from_directory
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from pydantic import BaseModel, ValidationError
from werkzeug.exceptions import HTTPException
from werkzeug.security import safe_join

from privfinos import API_NAME, __version__
from privfinos.config import get_settings
from privfinos.db import Database, utcnow
from privfinos.errors import AppError, BadRequestError, InternalServerError, RequestValidationError
from privfinos.logger import get_logger
from privfinos.migration_runner import run_all_pending
from privfinos.schema import create_database
from privfinos.schemas import (
    AccountCreate,
    AccountQuery,
    AccountUpdate,
    CategoryCreate,
    CategoryQuery,
    CategoryUpdate,
    HealthCheck,
    IdParam,
    TransactionCreate,
    TransactionQuery,
    TransactionUpdate,
)
from privfinos.services import AccountsService, CategoriesService, TransactionsService

log = get_logger(__name__)

EXTENSION_KEY = "privfinos"


class CustomJSONProvider(DefaultJSONProvider):
    """
    JSON provider for the API's value types.

    Converts:
    - pydantic models to their camelCase JSON form
    - Decimal to float
    - datetime/date to ISO 8601
    """

    def default(self, obj):
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True)
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime.datetime, datetime.date)):
            return obj.isoformat()
        return super().default(obj)


# =============================================================================
# VALIDATION
# =============================================================================

def _raw_input(target, view_args):
    if target == "json":
        payload = request.get_json(force=True, silent=True)
        if payload is None:
            if request.get_data():
                raise BadRequestError("Malformed JSON in request body", "INVALID_JSON")
            payload = {}
        return payload
    if target == "query":
        return request.args.to_dict()
    if target == "param":
        return dict(view_args)
    raise ValueError(f"Unknown validation target: {target}")


def validate(target, schema):
    """
    Validate one part of the request against a pydantic schema.

    target is "json" (request body), "query" (query string) or "param" (path
    parameters). On failure the request stops with a 400 VALIDATION_ERROR.
    On success the parsed model is available through valid(target); for
    "param" the view also receives the normalized values as keyword arguments.
    Stack several decorators to validate several targets.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            raw = _raw_input(target, kwargs)
            try:
                parsed = schema.model_validate(raw)
            except ValidationError as exc:
                raise RequestValidationError(json.loads(exc.json(include_url=False))) from exc

            g.setdefault("valid", {})[target] = parsed
            if target == "param":
                kwargs.update(parsed.model_dump())
            return view(*args, **kwargs)
        return wrapper
    return decorator


def valid(target):
    """Return the model parsed by @validate(target, ...) for this request."""
    return g.valid[target]


def service(name):
    return current_app.extensions[EXTENSION_KEY][name]


def ok(data, status=200):
    return jsonify(success=True, data=data), status


def error_response(error_dict, status):
    return jsonify(success=False, error=error_dict), status


api = Blueprint("api", __name__, url_prefix="/api")


# --- API ROOT & HEALTH ---

@api.route("", methods=["GET"])
def api_root():
    return jsonify(name=API_NAME, version=__version__, status="running")


@api.route("/health", methods=["GET"])
def health():
    return jsonify(HealthCheck(status="ok", timestamp=utcnow().isoformat(), version=__version__))


# --- CATEGORY API ROUTES ---

@api.route("/categories", methods=["GET"])
@validate("query", CategoryQuery)
def get_categories():
    return ok(service("categories").get_all(valid("query")))


@api.route("/categories/<id>", methods=["GET"])
@validate("param", IdParam)
def get_category(id):
    return ok(service("categories").get_by_id(id))


@api.route("/categories", methods=["POST"])
@validate("json", CategoryCreate)
def create_category():
    return ok(service("categories").create(valid("json")), 201)


@api.route("/categories/<id>", methods=["PUT"])
@validate("param", IdParam)
@validate("json", CategoryUpdate)
def update_category(id):
    return ok(service("categories").update(id, valid("json")))


@api.route("/categories/<id>", methods=["DELETE"])
@validate("param", IdParam)
def delete_category(id):
    """Soft delete a category (sets isActive = false)."""
    return ok(service("categories").delete(id))


@api.route("/categories/<id>/hard", methods=["DELETE"])
@validate("param", IdParam)
def hard_delete_category(id):
    """Permanently delete a category."""
    return ok(service("categories").hard_delete(id))


# --- ACCOUNT API ROUTES ---

@api.route("/accounts", methods=["GET"])
@validate("query", AccountQuery)
def get_accounts():
    return ok(service("accounts").get_all(valid("query")))


@api.route("/accounts/balance/total", methods=["GET"])
def get_total_balance():
    """Total balance across all active accounts."""
    return ok(service("accounts").get_total_balance())


@api.route("/accounts/<id>", methods=["GET"])
@validate("param", IdParam)
def get_account(id):
    return ok(service("accounts").get_by_id(id))


@api.route("/accounts/<id>/balance", methods=["GET"])
@validate("param", IdParam)
def get_account_balance(id):
    return ok(service("accounts").get_balance(id))


@api.route("/accounts", methods=["POST"])
@validate("json", AccountCreate)
def create_account():
    return ok(service("accounts").create(valid("json")), 201)


@api.route("/accounts/<id>", methods=["PUT"])
@validate("param", IdParam)
@validate("json", AccountUpdate)
def update_account(id):
    return ok(service("accounts").update(id, valid("json")))


@api.route("/accounts/<id>", methods=["DELETE"])
@validate("param", IdParam)
def delete_account(id):
    """Soft delete an account (sets isActive = false)."""
    return ok(service("accounts").delete(id))


@api.route("/accounts/<id>/hard", methods=["DELETE"])
@validate("param", IdParam)
def hard_delete_account(id):
    """Permanently delete an account and, through the schema, its transactions."""
    return ok(service("accounts").hard_delete(id))


# --- TRANSACTION API ROUTES ---

@api.route("/transactions", methods=["GET"])
@validate("query", TransactionQuery)
def get_transactions():
    return ok(service("transactions").get_all(valid("query")))


@api.route("/transactions/<id>", methods=["GET"])
@validate("param", IdParam)
def get_transaction(id):
    return ok(service("transactions").get_by_id(id))


@api.route("/transactions", methods=["POST"])
@validate("json", TransactionCreate)
def create_transaction():
    return ok(service("transactions").create(valid("json")), 201)


@api.route("/transactions/<id>", methods=["PUT"])
@validate("param", IdParam)
@validate("json", TransactionUpdate)
def update_transaction(id):
    return ok(service("transactions").update(id, valid("json")))


@api.route("/transactions/<id>", methods=["DELETE"])
@validate("param", IdParam)
def delete_transaction(id):
    return ok(service("transactions").delete(id))


# =============================================================================
# REQUEST LOGGING & ERROR HANDLERS
# =============================================================================

def _start_timer():
    g.request_started = time.perf_counter()


def _log_request(response):
    started = g.get("request_started")
    duration_ms = round((time.perf_counter() - started) * 1000, 2) if started else None
    log.info(
        "request_completed",
        method=request.method,
        path=request.path,
        status=response.status_code,
        duration_ms=duration_ms,
    )
    return response


def _handle_app_error(error):
    if error.status_code >= 500:
        log.error("request_error", path=request.path, code=error.code, message=error.message)
    else:
        log.info("request_rejected", path=request.path, status=error.status_code, code=error.code)
    return error_response(error.to_dict(), error.status_code)


def _web_response():
    """Serve a built front-end file, or index.html for client-side routes."""
    web_dist = current_app.config.get("WEB_DIST")
    if web_dist is None or request.method not in ("GET", "HEAD") or request.path.startswith("/api"):
        return None

    asset = request.path.lstrip("/")
    path = safe_join(web_dist, asset) if asset else None
    if path and os.path.isfile(path):
        return send_from_directory(web_dist, asset)
    if os.path.isfile(os.path.join(web_dist, "index.html")):
        return send_from_directory(web_dist, "index.html")
    return None


def _handle_http_error(error):
    if error.code == 404:
        response = _web_response()
        if response is not None:
            return response
        return error_response({"message": "Not found", "code": "NOT_FOUND"}, 404)

    code = (error.name or "HTTP error").upper().replace(" ", "_")
    return error_response({"message": error.description or error.name, "code": code}, error.code)


def _handle_unexpected_error(error):
    log.exception("request_error", path=request.path, error=str(error))
    return error_response(InternalServerError().to_dict(), 500)


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def open_database(settings):
    """Open the configured database and bring its schema up to date."""
    database = Database(settings.database_url).open()
    if not create_database(database):
        database.close()
        raise RuntimeError(f"Could not create schema in {settings.database_url}")
    run_all_pending(database)
    return database


def create_app(settings=None, database=None):
    """
    Build the Flask application.

    Args:
        settings (Settings): Validated settings; loaded from the environment if omitted
        database (Database): Open database handle shared by every service. If
            omitted, the configured database is opened (schema + migrations
            applied) and closed when the process exits.
    """
    settings = settings or get_settings()
    if database is None:
        database = open_database(settings)
        atexit.register(database.close)

    web_dist = Path(settings.web_dist_path).resolve()
    serve_static = settings.is_production and web_dist.is_dir()

    app = Flask(__name__, static_folder=None)
    app.json = CustomJSONProvider(app)
    app.config["SETTINGS"] = settings
    # Front-end files are served from the 404 handler, never from a catch-all route
    app.config["WEB_DIST"] = str(web_dist) if serve_static else None

    # Enable CORS for the web front end (allows requests from the configured origins)
    CORS(app, origins=settings.cors_origins, supports_credentials=True)

    app.extensions[EXTENSION_KEY] = {
        "categories": CategoriesService(database),
        "accounts": AccountsService(database),
        "transactions": TransactionsService(database),
    }

    app.before_request(_start_timer)
    app.after_request(_log_request)
    app.register_error_handler(AppError, _handle_app_error)
    app.register_error_handler(HTTPException, _handle_http_error)
    app.register_error_handler(Exception, _handle_unexpected_error)

    app.register_blueprint(api)

    if serve_static:
        log.info("serving_static_files", path=str(web_dist))
    elif settings.is_production:
        log.warning("web_dist_missing", path=str(web_dist))

    return app
