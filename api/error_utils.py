"""JSON error bodies for the ESG Sunshine endpoints: {error_code, message, details?}."""

import logging
from typing import Any, Optional

from flask import jsonify

ERROR_CODES = {
    "INVALID_REQUEST": "Request body must be a JSON object",
    "VALIDATION_ERROR": "Request validation failed",
    "NOT_FOUND": "The requested resource was not found",
    "SERVER_ERROR": "An unexpected error occurred on the server",
}


def create_error_response(error_code: str, message: Optional[str] = None,
                          details: Optional[Any] = None, status_code: int = 500) -> tuple:
    if error_code not in ERROR_CODES:
        logging.warning(f"Unknown error code '{error_code}', reporting SERVER_ERROR")
        error_code = "SERVER_ERROR"

    body = {"error_code": error_code, "message": message or ERROR_CODES[error_code]}
    if details:
        body["details"] = details

    logging.error(f"{status_code} {error_code}: {body['message']}")
    return jsonify(body), status_code


def handle_exception(e: Exception, context: str) -> tuple:
    logging.error(f"{context} failed with {type(e).__name__}: {e}", exc_info=True)
    return create_error_response("SERVER_ERROR", details={"error_type": type(e).__name__})


def not_found_error(message: Optional[str] = None) -> tuple:
    return create_error_response("NOT_FOUND", message, status_code=404)


def validation_error(message: Optional[str] = None, details: Optional[Any] = None) -> tuple:
    return create_error_response("VALIDATION_ERROR", message, details, status_code=400)


def bad_request_error(message: Optional[str] = None) -> tuple:
    return create_error_response("INVALID_REQUEST", message, status_code=400)
