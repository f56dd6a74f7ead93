"""
Application-wide error handlers.

Controllers raise DomainError for lookups, conflicts and bad input; these
handlers turn them (and Werkzeug HTTP errors) into JSON error responses.
"""
import logging

from flask import Blueprint
from werkzeug.exceptions import HTTPException

from ..exceptions import DomainError

logger = logging.getLogger(__name__)

bp = Blueprint("errors", __name__)


@bp.app_errorhandler(DomainError)
def handle_domain_error(err: DomainError):
    logger.info("%s (%s): %s", err.kind, err.status_code, err.message)
    return {"error": err.to_dict()}, err.status_code


@bp.app_errorhandler(HTTPException)
def handle_http_error(err: HTTPException):
    return {"error": {"name": type(err).__name__, "message": err.description}}, err.code
