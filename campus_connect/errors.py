import logging
from flask import jsonify
from werkzeug.exceptions import HTTPException
from .extensions import db

logger = logging.getLogger(__name__)


def error_response(status: int, message: str, errors=None, **extra):
    body = {"message": message, "errors": errors or []}
    body.update(extra)
    return jsonify(body), status


def bad_request(msg: str):
    return error_response(400, msg)


def validation_failed(errors):
    return error_response(400, errors[0]["msg"], errors)


def forbidden(msg: str = "Forbidden"):
    return error_response(403, msg)


def not_found(msg: str = "Not found"):
    return error_response(404, msg)


def server_error(msg: str, exc: Exception):
    return error_response(500, msg, error=str(exc))


def register_error_handlers(app) -> None:
    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return error_response(e.code or 500, e.description or e.name)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        db.session.rollback()
        return error_response(500, "Something went wrong!")
