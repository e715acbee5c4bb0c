"""Unit tests for error classification utilities."""

import pydantic
import pytest

from src.core.errors import (
    DeactivatedError,
    DuplicateError,
    EditConflictError,
    ErrorCode,
    ErrorSeverity,
    NotAuthenticatedError,
    NotFoundError,
    StorageError,
    TransportError,
    ValidationError,
    classify_error_with_response,
)
from src.domain.task import TaskFields


@pytest.mark.unit
class TestValidationErrorFromPydantic:
    """Tests for ValidationError.from_pydantic."""

    def test_strips_value_error_prefix(self):
        """Test custom validator messages are surfaced without pydantic's prefix."""
        with pytest.raises(pydantic.ValidationError) as exc_info:
            TaskFields(title="   ")

        error = ValidationError.from_pydantic(exc_info.value)

        assert str(error) == "Task title is required"
        assert error.field == "title"

    def test_reports_field_of_first_error(self):
        """Test the failing field is recorded."""
        with pytest.raises(pydantic.ValidationError) as exc_info:
            TaskFields(title="Write report", status="Someday")

        error = ValidationError.from_pydantic(exc_info.value)

        assert error.field == "status"


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    """Tests for classify_error_with_response function."""

    def test_validation_error_keeps_message(self):
        """Test validation errors show their own message."""
        response = classify_error_with_response(ValidationError("Task title is required", field="title"))

        assert response.code == ErrorCode.ERR_VALIDATION
        assert response.message == "Task title is required"
        assert response.severity == ErrorSeverity.LOW

    def test_not_found_error(self):
        """Test not-found errors keep their message."""
        response = classify_error_with_response(NotFoundError("Task t9 not found"))

        assert response.code == ErrorCode.ERR_NOT_FOUND
        assert response.message == "Task t9 not found"

    def test_duplicate_error(self):
        """Test duplicate registration errors keep their message."""
        response = classify_error_with_response(DuplicateError("Username is already taken"))

        assert response.code == ErrorCode.ERR_DUPLICATE
        assert response.message == "Username is already taken"
        assert "different" in response.suggestion

    def test_deactivated_error(self):
        """Test deactivated accounts point the user at support."""
        response = classify_error_with_response(DeactivatedError("user u1"))

        assert response.code == ErrorCode.ERR_DEACTIVATED
        assert "support" in response.suggestion.lower()

    def test_not_authenticated_error(self):
        """Test unauthenticated access asks the user to sign in."""
        response = classify_error_with_response(NotAuthenticatedError("no principal"))

        assert response.code == ErrorCode.ERR_NOT_AUTHENTICATED
        assert response.message == "You are not signed in."

    def test_edit_conflict_error(self):
        """Test edit conflicts ask to finish the current edit."""
        response = classify_error_with_response(EditConflictError("Task t1 is already being edited"))

        assert response.code == ErrorCode.ERR_EDIT_CONFLICT
        assert "cancel" in response.suggestion.lower()

    def test_storage_error_is_high_severity(self):
        """Test storage failures are reported as high severity."""
        response = classify_error_with_response(StorageError("disk full"))

        assert response.code == ErrorCode.ERR_STORAGE
        assert response.severity == ErrorSeverity.HIGH

    @pytest.mark.parametrize(
        "exception",
        [
            TransportError("Gateway returned status 500", status_code=500),
            ConnectionError("Connection refused"),
            TimeoutError("timed out"),
        ],
    )
    def test_transport_errors(self, exception):
        """Test network failures share the transport classification."""
        response = classify_error_with_response(exception)

        assert response.code == ErrorCode.ERR_TRANSPORT
        assert response.message == "Could not reach the task server."
        assert "connection" in response.suggestion.lower()

    def test_unknown_error(self):
        """Test classification of an unrecognized error."""
        response = classify_error_with_response(RuntimeError("boom"))

        assert response.code == ErrorCode.ERR_UNKNOWN
        assert response.message == "An unexpected error occurred."
        assert response.severity == ErrorSeverity.MEDIUM
