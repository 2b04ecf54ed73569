"""
Centralized error handling for the spreadsheet import/export service
"""
from abc import ABC
from typing import Optional, Dict, Any
from enum import Enum

class ErrorCode(Enum):
    """Standardized error codes"""
    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UPLOAD_FORMAT_ERROR = "UPLOAD_FORMAT_ERROR"
    NOT_A_SPREADSHEET = "NOT_A_SPREADSHEET"
    REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"

    # Cell level errors (never returned by the API, reported as red cells)
    MALFORMED_REFERENCE = "MALFORMED_REFERENCE"
    CELL_CONVERSION_ERROR = "CELL_CONVERSION_ERROR"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"

    # Not found errors
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"

    # Infrastructure errors
    SCHEMA_ERROR = "SCHEMA_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"

class BaseApplicationException(Exception, ABC):
    """Base exception for the application"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400
    ):
        self.message = message
        self.error_code = error_code.value
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the exception to a dict for the API response"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "status_code": self.status_code
        }

class ValidationException(BaseApplicationException):
    """Validation errors"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 400)

class UploadFormatError(ValidationException):
    """Missing, empty or non-xlsx upload; raised before any decoding"""

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message, ErrorCode.UPLOAD_FORMAT_ERROR, {"filename": filename})

class NotASpreadsheetError(ValidationException):
    """The uploaded content is not a well-formed xlsx workbook"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.NOT_A_SPREADSHEET, details)

class NotFoundException(BaseApplicationException):
    """Entity not found"""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if entity_id is not None:
            message = f"{entity_type} '{entity_id}' not found"
        else:
            message = f"{entity_type} not found"

        error_details = details or {}
        if entity_id is not None:
            error_details["entity_id"] = entity_id
        error_details["entity_type"] = entity_type

        super().__init__(
            message,
            ErrorCode.ENTITY_NOT_FOUND,
            error_details,
            404
        )

class InfrastructureException(BaseApplicationException):
    """Infrastructure errors"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 500)

class SchemaError(InfrastructureException):
    """An entity type cannot be turned into a template"""

    def __init__(self, message: str, entity_type: Optional[str] = None, field_name: Optional[str] = None):
        details = {"entity_type": entity_type}
        if field_name is not None:
            details["field_name"] = field_name
        super().__init__(message, ErrorCode.SCHEMA_ERROR, details)

class PersistenceError(InfrastructureException):
    """The persistence sink rejected a validated batch"""

    def __init__(self, message: str, entity_type: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details["entity_type"] = entity_type
        super().__init__(message, ErrorCode.DATABASE_ERROR, error_details)


# Cell level errors. Raised and caught inside the import validator only.

class CellValidationError(Exception):
    """A single cell could not be turned into a valid field value"""

    error_code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, field_name: Optional[str] = None, value: Any = None):
        self.message = message
        self.field_name = field_name
        self.value = value
        super().__init__(message)

class MalformedReferenceError(CellValidationError):
    """Foreign key cell whose leading token is not an integer key"""

    error_code = ErrorCode.MALFORMED_REFERENCE

class CellConversionError(CellValidationError):
    """Cell text that cannot be coerced to the field's scalar type"""

    error_code = ErrorCode.CELL_CONVERSION_ERROR

class ConstraintViolation(CellValidationError):
    """Coerced value rejected by a declared constraint"""

    error_code = ErrorCode.CONSTRAINT_VIOLATION
