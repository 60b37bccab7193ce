from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel

from switch_auth.schemas.common import (
    BirthDate, CamelModel, Email, Gender, LicensePlate, Password, PaymentMethod, PhoneNumber,
    PHONE_RE, RegistrationModel, Role, Url, VehicleYear, any_date, future_date, min_length, pattern, url,
)


# ------------------ Nested blocks ------------------ #

class EmergencyContactIn(CamelModel):
    name: Annotated[str, min_length(2, "Emergency contact name must be at least 2 characters")]
    phone_number: Annotated[str, pattern(PHONE_RE, "Invalid emergency contact phone number")]
    relationship: Annotated[str, min_length(2, "Relationship must be specified")]


class VehicleDetailsIn(CamelModel):
    make: Annotated[str, min_length(2, "Vehicle make must be specified")]
    model: Annotated[str, min_length(2, "Vehicle model must be specified")]
    year: VehicleYear
    color: Annotated[str, min_length(2, "Vehicle color must be specified")]
    license_plate: LicensePlate
    insurance_number: Annotated[str, min_length(5, "Insurance number must be at least 5 characters")]
    insurance_expiry_date: Annotated[datetime, future_date("Insurance expiry date must be a valid future date")]


class VehicleDetailsUpdate(VehicleDetailsIn):
    # expiry dates are only enforced at registration
    insurance_expiry_date: Annotated[datetime, any_date("Insurance expiry date must be a valid date")]


class BankDetailsIn(CamelModel):
    account_number: Annotated[str, min_length(10, "Account number must be at least 10 digits")]
    bank_name: Annotated[str, min_length(2, "Bank name must be specified")]
    account_name: Annotated[str, min_length(2, "Account name must be specified")]


class DriverDocumentsIn(CamelModel):
    driver_license: Annotated[str, url("Driver license document must be a valid URL")]
    vehicle_registration: Annotated[str, url("Vehicle registration document must be a valid URL")]
    insurance_certificate: Annotated[str, url("Insurance certificate must be a valid URL")]
    background_check: Annotated[str, url("Background check document must be a valid URL")]


FirstName = Annotated[str, min_length(2, "First name must be at least 2 characters")]
LastName = Annotated[str, min_length(2, "Last name must be at least 2 characters")]
Username = Annotated[str, min_length(2, "Username must be at least 2 characters")]
LicenseNumber = Annotated[str, min_length(5, "License number must be at least 5 characters")]


# ------------------ Registration ------------------ #

class PassengerCreate(RegistrationModel):
    email: Email
    password: Password
    first_name: FirstName
    last_name: LastName
    username: Username
    gender: Optional[Gender] = None
    phone_number: PhoneNumber
    date_of_birth: Optional[BirthDate] = None
    profile_picture: Optional[Url] = None
    role: Literal["passenger"]
    preferred_payment_method: Optional[PaymentMethod] = None
    emergency_contact: Optional[EmergencyContactIn] = None


class DriverCreate(RegistrationModel):
    email: Email
    password: Password
    first_name: FirstName
    last_name: LastName
    # validated like a passenger username, never stored on drivers
    username: Username
    gender: Optional[Gender] = None
    phone_number: PhoneNumber
    date_of_birth: Optional[BirthDate] = None
    profile_picture: Optional[Url] = None
    role: Literal["driver"]
    license_number: LicenseNumber
    license_expiry_date: Annotated[datetime, future_date("License expiry date must be a valid future date")]
    vehicle_details: VehicleDetailsIn
    bank_details: Optional[BankDetailsIn] = None
    documents: DriverDocumentsIn


# ------------------ Profile updates ------------------ #

class PassengerUpdate(CamelModel):
    """Partial passenger profile. email, password and role cannot be changed here."""

    first_name: Optional[FirstName] = None
    last_name: Optional[LastName] = None
    username: Optional[Username] = None
    gender: Optional[Gender] = None
    phone_number: Optional[PhoneNumber] = None
    date_of_birth: Optional[BirthDate] = None
    profile_picture: Optional[Url] = None
    preferred_payment_method: Optional[PaymentMethod] = None
    emergency_contact: Optional[EmergencyContactIn] = None


class DriverUpdate(CamelModel):
    """Partial driver profile. email, password and role cannot be changed here."""

    first_name: Optional[FirstName] = None
    last_name: Optional[LastName] = None
    phone_number: Optional[PhoneNumber] = None
    date_of_birth: Optional[BirthDate] = None
    profile_picture: Optional[Url] = None
    license_number: Optional[LicenseNumber] = None
    license_expiry_date: Optional[Annotated[datetime, any_date("License expiry date must be a valid date")]] = None
    vehicle_details: Optional[VehicleDetailsUpdate] = None
    bank_details: Optional[BankDetailsIn] = None
    documents: Optional[DriverDocumentsIn] = None


# ------------------ Login / tokens ------------------ #

class UserLogin(CamelModel):
    email: Email
    password: Annotated[str, min_length(1, "Password is required")]
    role: Optional[Role] = None


class TokenClaims(BaseModel):
    id: str
    email: str
    role: Role
    exp: Optional[int] = None


class ApiResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: List[Any] = []
