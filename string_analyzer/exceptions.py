from fastapi import status
from typing import Optional


class StringAnalyzerError(Exception):
    """Base class for every error the service reports to a caller"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class MissingInputError(StringAnalyzerError):
    """A required field was not supplied at all"""

    status_code = status.HTTP_400_BAD_REQUEST
    message = 'Invalid request body or missing "value" field'


class MissingQueryError(MissingInputError):
    message = "Query parameter 'query' is required"


class InvalidInputError(StringAnalyzerError):
    """A field was supplied with the wrong type"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = 'Invalid data type for "value" (must be string)'


class DuplicateValueError(StringAnalyzerError):
    status_code = status.HTTP_409_CONFLICT
    message = "String already exists in the system"


class RecordNotFoundError(StringAnalyzerError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "String does not exist in the system"


class UnparseablePhraseError(StringAnalyzerError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Unable to parse natural language query"


class ConflictingFilterError(StringAnalyzerError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Query parsed but resulted in conflicting filters"


class StoreFailureError(StringAnalyzerError):
    """Anything unexpected coming back from the database"""

    message = "Storage operation failed"
