"""
API Response Utilities - Standardized responses for the catalog art endpoints
"""

from flask import jsonify
import structlog

logger = structlog.get_logger("api")


# API Error Codes
class ErrorCode:
    SUCCESS = "SUCCESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"


def success_response(data=None, status_code=200):
    """Wrap a payload as {"code": "SUCCESS", "success": true, "data": ...}"""
    response = {"code": ErrorCode.SUCCESS, "success": True}
    if data is not None:
        response["data"] = data
    return jsonify(response), status_code


def error_response(error_code, message, details=None, status_code=400):
    response = {"code": error_code, "success": False, "message": message}
    if details:
        response["details"] = details
    return jsonify(response), status_code


def validation_error_response(field, message):
    logger.warning("request_rejected", field=field, error=message)
    return error_response(
        ErrorCode.VALIDATION_ERROR,
        f"Validation failed for field: {field}",
        details={"field": field, "error": message},
    )


def not_found_response(resource_type, resource_id):
    message = f"{resource_type} with ID '{resource_id}' not found"
    return error_response(ErrorCode.NOT_FOUND, message, status_code=404)
