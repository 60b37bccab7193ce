from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from switch_auth.schemas.common import DocumentModel, Gender, PaymentMethod


class EmergencyContact(DocumentModel):
    name: str = ""
    phone_number: str = ""
    relationship: str = ""


class VehicleDetails(DocumentModel):
    make: str
    model: str
    year: int
    color: str
    license_plate: str
    insurance_number: str
    insurance_expiry_date: datetime


class BankDetails(DocumentModel):
    account_number: str = ""
    bank_name: str = ""
    account_name: str = ""


class DriverDocuments(DocumentModel):
    driver_license: str
    vehicle_registration: str
    insurance_certificate: str
    background_check: str


class UserBase(DocumentModel):
    """Fields every role shares. Never instantiated on its own."""

    id: str = ""
    email: str
    created_at: datetime
    updated_at: datetime


class Passenger(UserBase):
    role: Literal["passenger"] = "passenger"
    first_name: str
    last_name: str
    username: str = ""
    gender: Optional[Gender] = None
    phone_number: str
    date_of_birth: Optional[datetime] = None
    profile_picture: str = ""
    preferred_payment_method: PaymentMethod = "cash"
    wallet_balance: float = Field(default=0, ge=0)
    is_active: bool = True
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)


class Driver(UserBase):
    role: Literal["driver"] = "driver"
    first_name: str
    last_name: str
    phone_number: str
    date_of_birth: Optional[datetime] = None
    profile_picture: str = ""
    license_number: str
    license_expiry_date: datetime
    vehicle_details: VehicleDetails
    rating: float = 0
    total_rides: int = 0
    is_active: bool = True
    is_available: bool = False
    bank_details: BankDetails = Field(default_factory=BankDetails)
    documents: DriverDocuments


User = Annotated[Union[Passenger, Driver], Field(discriminator="role")]


def to_document(user: Union[Passenger, Driver]) -> dict:
    """Public, JSON-safe camelCase form; absent optionals are left out."""
    return user.model_dump(mode="json", by_alias=True, exclude_none=True)
