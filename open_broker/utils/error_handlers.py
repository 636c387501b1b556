"""Error handling utilities for API responses."""

import logging
from typing import Dict, Any, Tuple
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from open_broker.exceptions import ServiceBrokerError, ErrorCode
from open_broker.models.error import ErrorMessage

logger = logging.getLogger(__name__)


class ErrorResponseFormatter:
    """Formats failures as wire error documents."""

    @staticmethod
    def to_error_message(error: Exception) -> ErrorMessage:
        """Build the error document for a failure.

        Unknown exceptions carry no error code; their message becomes the
        description.
        """
        if isinstance(error, ServiceBrokerError):
            return ErrorMessage(error=error.error, description=error.description)

        return ErrorMessage(description=str(error) or type(error).__name__)

    @staticmethod
    def format_osb_error(error: Exception) -> Tuple[Dict[str, Any], int]:
        """Format a failure with its default status.

        Returns:
            Tuple of (response_dict, http_status_code)
        """
        message = ErrorResponseFormatter.to_error_message(error)
        return message.to_wire(), ErrorResponseFormatter.get_http_status(error)

    @staticmethod
    def get_http_status(error: Exception) -> int:
        """Default HTTP status of a failure, before per-operation overrides."""
        if isinstance(error, ServiceBrokerError):
            return ErrorResponseFormatter._get_http_status(error.error_code)
        return 500

    @staticmethod
    def _get_http_status(error_code: ErrorCode) -> int:
        """Map error codes to HTTP status codes."""
        status_map = {
            # 4xx Client Errors
            ErrorCode.API_VERSION_MISSING: 400,
            ErrorCode.INVALID_ORIGINATING_IDENTITY: 400,
            ErrorCode.MALFORMED_REQUEST: 400,
            ErrorCode.VALIDATION_FAILED: 400,
            ErrorCode.SERVICE_DEFINITION_NOT_FOUND: 400,
            ErrorCode.PLAN_NOT_FOUND: 400,
            ErrorCode.INVALID_PARAMETERS: 400,
            ErrorCode.OPERATION_IN_PROGRESS: 404,
            ErrorCode.INSTANCE_EXISTS: 409,
            ErrorCode.BINDING_EXISTS: 409,
            ErrorCode.API_VERSION_MISMATCH: 412,
            ErrorCode.INSTANCE_NOT_FOUND: 422,
            ErrorCode.BINDING_NOT_FOUND: 422,
            ErrorCode.ASYNC_REQUIRED: 422,
            ErrorCode.MAINTENANCE_INFO_CONFLICT: 422,
            ErrorCode.UPDATE_NOT_SUPPORTED: 422,
            ErrorCode.CONCURRENCY_ERROR: 422,
            ErrorCode.BINDING_REQUIRES_APP: 422,

            # 5xx Server Errors
            ErrorCode.BROKER_ERROR: 500,
            ErrorCode.SERVICE_UNAVAILABLE: 503,
        }

        return status_map.get(error_code, 500)


def register_error_handlers(app: Flask):
    """Register global error handlers for Flask app.

    These cover failures raised before an operation is invoked (version gate,
    identity decoding, request validation, catalog resolution) and anything
    the routes do not handle themselves.
    """

    @app.errorhandler(ServiceBrokerError)
    def handle_service_broker_error(error: ServiceBrokerError):
        """Handle taxonomy failures."""
        logger.warning(f"Request rejected: {error}")

        body, status = ErrorResponseFormatter.format_osb_error(error)
        return jsonify(body), status

    @app.errorhandler(404)
    def handle_not_found(error):
        """Handle 404 errors."""
        return jsonify(ErrorMessage(
            error="NotFound",
            description="The requested resource was not found"
        ).to_wire()), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        """Handle 405 errors."""
        return jsonify(ErrorMessage(
            error="MethodNotAllowed",
            description="The requested method is not allowed for this resource"
        ).to_wire()), 405

    @app.errorhandler(Exception)
    def handle_generic_error(error: Exception):
        """Handle unexpected errors."""
        if isinstance(error, HTTPException):
            return jsonify(ErrorMessage(description=error.description or error.name).to_wire()), error.code

        logger.error(f"Unexpected error: {error}", exc_info=True)

        body, status = ErrorResponseFormatter.format_osb_error(error)
        return jsonify(body), status
