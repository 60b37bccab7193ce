from typing import List, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel


class FieldError(BaseModel):
    field: str
    message: str
    code: str = "invalid"


class IdentityException(HTTPException):
    """Base for every error the identity core surfaces to the routing layer."""

    def __init__(self, status_code: int, detail: str, headers: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    @property
    def message(self) -> str:
        return self.detail


class PayloadValidationException(IdentityException):
    def __init__(self, errors: List[FieldError], message: Optional[str] = None):
        self.errors = errors
        if message is None:
            message = errors[0].message if errors else "Validation failed"
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class DuplicateEmailException(IdentityException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists"
        )


class ExpiredLicenseException(PayloadValidationException):
    def __init__(self, errors: Optional[List[FieldError]] = None):
        if errors is None:
            errors = [FieldError(field="licenseExpiryDate", message="License has expired", code="expired")]
        super().__init__(errors, message="License has expired")


class ExpiredInsuranceException(PayloadValidationException):
    def __init__(self, errors: Optional[List[FieldError]] = None):
        if errors is None:
            errors = [FieldError(
                field="vehicleDetails.insuranceExpiryDate",
                message="Insurance has expired",
                code="expired",
            )]
        super().__init__(errors, message="Insurance has expired")


class InvalidCredentialsException(IdentityException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )


class TokenInvalidException(IdentityException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AccessDeniedException(IdentityException):
    def __init__(self):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")


class NotFoundException(IdentityException):
    def __init__(self, what: str = "User"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


class StoreException(IdentityException):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity store is unavailable"
        )
