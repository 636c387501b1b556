"""Tests for the failure taxonomy and error formatting."""

import pytest

from open_broker.exceptions import (
    ApiVersionMismatchError, AsyncRequiredError, BindingRequiresAppError, ConcurrencyError, ErrorCode,
    InstanceExistsError, InvalidParametersError, MaintenanceInfoConflictError, OperationInProgressError,
    RequestValidationError, ServiceBrokerError, ServiceUnavailableError
)
from open_broker.utils.error_handlers import ErrorResponseFormatter


class TestServiceBrokerError:
    """Test the base exception."""

    def test_basic_error(self):
        error = ServiceBrokerError("Something failed")

        assert error.description == "Something failed"
        assert error.error_code == ErrorCode.BROKER_ERROR
        assert error.error is None
        assert error.to_dict() == {'description': 'Something failed'}

    def test_str_includes_details_and_cause(self):
        cause = ValueError("root cause")
        error = ServiceBrokerError("Something failed", details={'key': 'value'}, cause=cause)

        assert str(error) == "BROKER_ERROR: Something failed (key=value) [caused by: root cause]"

    def test_error_codes(self):
        assert AsyncRequiredError().to_dict()['error'] == 'AsyncRequired'
        assert MaintenanceInfoConflictError().to_dict()['error'] == 'MaintenanceInfoConflict'
        assert ConcurrencyError().to_dict()['error'] == 'ConcurrencyError'
        assert BindingRequiresAppError().to_dict()['error'] == 'RequiresApp'
        assert 'error' not in InstanceExistsError('i1').to_dict()

    def test_maintenance_info_conflict_custom_message(self):
        error = MaintenanceInfoConflictError("version 2.0 required")

        assert "version 2.0 required" in error.description

    def test_validation_error_joins_fields(self):
        error = RequestValidationError(['service_id', 'plan_id'])

        assert error.description == "Missing or invalid required fields: service_id, plan_id"
        assert error.fields == ['service_id', 'plan_id']

    def test_operation_token_length(self):
        with pytest.raises(ValueError):
            OperationInProgressError("x" * 10_001)

        assert OperationInProgressError("x" * 10_000).operation == "x" * 10_000

    def test_invalid_parameters_keeps_cause(self):
        cause = TypeError("bad")

        assert InvalidParametersError("size", cause=cause).cause is cause


class TestErrorResponseFormatter:
    """Test error document and default status mapping."""

    @pytest.mark.parametrize("error,expected", [
        (ApiVersionMismatchError('2.14', '2.13'), 412),
        (InstanceExistsError('i1'), 409),
        (AsyncRequiredError(), 422),
        (InvalidParametersError('size'), 400),
        (OperationInProgressError(), 404),
        (ServiceUnavailableError(), 503),
        (ServiceBrokerError('generic'), 500),
        (RuntimeError('boom'), 500),
    ])
    def test_default_status(self, error, expected):
        assert ErrorResponseFormatter.get_http_status(error) == expected

    def test_format_osb_error(self):
        body, status = ErrorResponseFormatter.format_osb_error(AsyncRequiredError())

        assert status == 422
        assert body == {
            'error': 'AsyncRequired',
            'description': 'This service plan requires client support for asynchronous service operations.'
        }

    def test_unknown_exception_has_no_error_code(self):
        body, status = ErrorResponseFormatter.format_osb_error(KeyError('missing'))

        assert status == 500
        assert set(body) == {'description'}
