from fastapi import HTTPException, status
from typing import Dict

class BookingValidationError(HTTPException):
    """Client input rejected before anything is persisted."""

    def __init__(self, errors: Dict[str, str], detail: str = "Validation failed"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        self.errors = errors

class PersistenceError(HTTPException):
    def __init__(self, detail: str = "Could not save your request. Please try again later."):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )
