from datetime import datetime, timezone

import pytest

from conftest import future_iso, make_driver_payload, make_passenger_payload, past_iso
from switch_auth.core.exceptions import (
    ExpiredInsuranceException, ExpiredLicenseException, PayloadValidationException,
)
from switch_auth.schemas.common import parse_datetime
from switch_auth.schemas.validation import SchemaKind, validate

CURRENT_YEAR = datetime.now(timezone.utc).year


def errors_of(kind, payload):
    with pytest.raises(PayloadValidationException) as exc_info:
        validate(kind, payload)
    return {e.field: e.message for e in exc_info.value.errors}


def test_valid_passenger_is_normalized():
    data = validate(SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload())
    assert data.email == "a@b.com"
    assert data.first_name == "John"
    assert data.gender is None
    assert data.date_of_birth is None


def test_every_violated_field_is_reported():
    payload = make_passenger_payload(email="not-an-email", password="short", firstName="J", phoneNumber="123")
    errors = errors_of(SchemaKind.PASSENGER_REGISTRATION, payload)
    assert errors == {
        "email": "Invalid email format",
        "password": "Password must be at least 8 characters",
        "firstName": "First name must be at least 2 characters",
        "phoneNumber": "Invalid phone number format",
    }


def test_exception_message_is_first_error():
    with pytest.raises(PayloadValidationException) as exc_info:
        validate(SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(email="nope"))
    assert exc_info.value.detail == "Invalid email format"
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize("password", ["abcdefgh1", "ABCDEFGH1", "Abcdefghi"])
def test_password_needs_lower_upper_and_digit(password):
    errors = errors_of(SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(password=password))
    assert errors["password"] == (
        "Password must contain at least one uppercase letter, one lowercase letter, and one number"
    )


@pytest.mark.parametrize("phone", ["+2348012345678", "(080) 123-4567", "0801 234 5678", "0801234567"])
def test_phone_formats_accepted(phone):
    data = validate(SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(phoneNumber=phone))
    assert data.phone_number == phone


@pytest.mark.parametrize("phone", ["+123456789", "0801234567a", "phone number"])
def test_phone_formats_rejected(phone):
    errors = errors_of(SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(phoneNumber=phone))
    assert errors == {"phoneNumber": "Invalid phone number format"}


def test_date_of_birth_uses_whole_years():
    # turns 18 on the last day of this year, still accepted
    data = validate(
        SchemaKind.PASSENGER_REGISTRATION,
        make_passenger_payload(dateOfBirth=f"{CURRENT_YEAR - 18}-12-31"),
    )
    assert data.date_of_birth.year == CURRENT_YEAR - 18


@pytest.mark.parametrize("dob", [f"{CURRENT_YEAR - 17}-01-01", f"{CURRENT_YEAR - 101}-06-01", "yesterday"])
def test_date_of_birth_out_of_range(dob):
    errors = errors_of(SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(dateOfBirth=dob))
    assert errors == {"dateOfBirth": "You must be between 18 and 100 years old"}


def test_emergency_contact_rules():
    payload = make_passenger_payload(emergencyContact={"name": "M", "phoneNumber": "12", "relationship": ""})
    errors = errors_of(SchemaKind.PASSENGER_REGISTRATION, payload)
    assert errors == {
        "emergencyContact.name": "Emergency contact name must be at least 2 characters",
        "emergencyContact.phoneNumber": "Invalid emergency contact phone number",
        "emergencyContact.relationship": "Relationship must be specified",
    }


def test_passenger_role_is_required():
    payload = make_passenger_payload()
    del payload["role"]
    errors = errors_of(SchemaKind.PASSENGER_REGISTRATION, payload)
    assert set(errors) == {"role"}


def test_valid_driver_is_normalized():
    data = validate(SchemaKind.DRIVER_REGISTRATION, make_driver_payload())
    assert data.vehicle_details.license_plate == "ABC-123"
    assert data.license_expiry_date > datetime.now(timezone.utc)
    assert data.bank_details is None


@pytest.mark.parametrize("year,message", [
    (1989, "Vehicle year must be 1990 or later"),
    (CURRENT_YEAR + 2, "Vehicle year cannot be in the future"),
])
def test_vehicle_year_bounds(year, message):
    payload = make_driver_payload()
    payload["vehicleDetails"]["year"] = year
    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, payload)
    assert errors == {"vehicleDetails.year": message}


def test_vehicle_year_next_year_allowed():
    payload = make_driver_payload()
    payload["vehicleDetails"]["year"] = CURRENT_YEAR + 1
    assert validate(SchemaKind.DRIVER_REGISTRATION, payload).vehicle_details.year == CURRENT_YEAR + 1


def test_vehicle_year_must_be_a_number():
    payload = make_driver_payload()
    payload["vehicleDetails"]["year"] = "2020"
    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, payload)
    assert set(errors) == {"vehicleDetails.year"}


@pytest.mark.parametrize("plate", ["abc-123", "ABCD-1234", ""])
def test_license_plate_rejected(plate):
    payload = make_driver_payload()
    payload["vehicleDetails"]["licensePlate"] = plate
    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, payload)
    assert errors == {"vehicleDetails.licensePlate": "Invalid license plate format"}


@pytest.mark.parametrize("plate", ["ABCD-123", "A", "KJA 12 B"])
def test_license_plate_accepted(plate):
    payload = make_driver_payload()
    payload["vehicleDetails"]["licensePlate"] = plate
    assert validate(SchemaKind.DRIVER_REGISTRATION, payload).vehicle_details.license_plate == plate


@pytest.mark.parametrize("field,value", [
    ("gender", "unknown"),
    ("preferredPaymentMethod", "crypto"),
])
def test_enum_fields_reject_unknown_values(field, value):
    errors = errors_of(SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(**{field: value}))
    assert set(errors) == {field}


def test_profile_picture_must_be_a_url():
    errors = errors_of(SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(profilePicture="me.png"))
    assert errors == {"profilePicture": "Invalid url"}


def test_insurance_number_length():
    payload = make_driver_payload()
    payload["vehicleDetails"]["insuranceNumber"] = "IN-1"
    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, payload)
    assert errors == {"vehicleDetails.insuranceNumber": "Insurance number must be at least 5 characters"}


def test_driver_documents_must_be_urls():
    payload = make_driver_payload()
    payload["documents"]["backgroundCheck"] = "not a url"
    del payload["documents"]["driverLicense"]
    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, payload)
    assert errors["documents.backgroundCheck"] == "Background check document must be a valid URL"
    assert "documents.driverLicense" in errors


def test_bank_details_account_number_length():
    payload = make_driver_payload(bankDetails={"accountNumber": "12345", "bankName": "GTBank", "accountName": "Ada Obi"})
    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, payload)
    assert errors == {"bankDetails.accountNumber": "Account number must be at least 10 digits"}


def test_bank_details_names_length():
    payload = make_driver_payload(bankDetails={"accountNumber": "0123456789", "bankName": "G", "accountName": "A"})
    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, payload)
    assert errors == {
        "bankDetails.bankName": "Bank name must be specified",
        "bankDetails.accountName": "Account name must be specified",
    }


def test_driver_username_is_required():
    payload = make_driver_payload()
    del payload["username"]
    assert set(errors_of(SchemaKind.DRIVER_REGISTRATION, payload)) == {"username"}

    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, make_driver_payload(username="a"))
    assert errors == {"username": "Username must be at least 2 characters"}


@pytest.mark.parametrize("kind,payload,field", [
    (SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(profilePicture=None), "profilePicture"),
    (SchemaKind.PASSENGER_REGISTRATION, make_passenger_payload(gender=None), "gender"),
    (SchemaKind.DRIVER_REGISTRATION, make_driver_payload(bankDetails=None), "bankDetails"),
])
def test_registration_rejects_explicit_null(kind, payload, field):
    assert set(errors_of(kind, payload)) == {field}


def test_update_ignores_explicit_null():
    data = validate(SchemaKind.PASSENGER_UPDATE, {"gender": None, "firstName": "Johnny"})
    assert data.model_dump(exclude_unset=True, exclude_none=True) == {"first_name": "Johnny"}


def test_snake_case_keys_are_unknown():
    payload = make_driver_payload(license_expiry_date=past_iso())
    data = validate(SchemaKind.DRIVER_REGISTRATION, payload)
    assert data.license_expiry_date > datetime.now(timezone.utc)

    del payload["licenseExpiryDate"]
    with pytest.raises(PayloadValidationException) as exc_info:
        validate(SchemaKind.DRIVER_REGISTRATION, payload)
    assert [(e.field, e.code) for e in exc_info.value.errors] == [("licenseExpiryDate", "missing")]


def test_snake_case_nested_keys_are_unknown():
    payload = make_driver_payload()
    vehicle = payload["vehicleDetails"]
    vehicle["insurance_expiry_date"] = past_iso()
    del vehicle["insuranceExpiryDate"]
    errors = errors_of(SchemaKind.DRIVER_REGISTRATION, payload)
    assert set(errors) == {"vehicleDetails.insuranceExpiryDate"}


def test_past_license_expiry_is_expired_license():
    with pytest.raises(ExpiredLicenseException) as exc_info:
        validate(SchemaKind.DRIVER_REGISTRATION, make_driver_payload(licenseExpiryDate=past_iso()))
    assert isinstance(exc_info.value, PayloadValidationException)
    assert exc_info.value.detail == "License has expired"
    assert [e.field for e in exc_info.value.errors] == ["licenseExpiryDate"]


def test_past_insurance_expiry_is_expired_insurance():
    payload = make_driver_payload()
    payload["vehicleDetails"]["insuranceExpiryDate"] = past_iso()
    with pytest.raises(ExpiredInsuranceException) as exc_info:
        validate(SchemaKind.DRIVER_REGISTRATION, payload)
    assert exc_info.value.detail == "Insurance has expired"


def test_unparseable_expiry_is_plain_validation_error():
    with pytest.raises(PayloadValidationException) as exc_info:
        validate(SchemaKind.DRIVER_REGISTRATION, make_driver_payload(licenseExpiryDate="next year"))
    assert type(exc_info.value) is PayloadValidationException
    assert exc_info.value.detail == "License expiry date must be a valid future date"


def test_login_requires_email_and_password_only():
    data = validate(SchemaKind.LOGIN, {"email": "a@b.com", "password": "x"})
    assert data.role is None

    errors = errors_of(SchemaKind.LOGIN, {"email": "a@b", "password": "", "role": "admin"})
    assert errors["email"] == "Invalid email format"
    assert errors["password"] == "Password is required"
    assert "role" in errors


def test_update_schema_drops_identity_fields():
    data = validate(SchemaKind.PASSENGER_UPDATE, {
        "email": "new@b.com",
        "password": "Whatever1",
        "role": "driver",
        "phoneNumber": "+2348000000000",
    })
    assert data.model_dump(exclude_unset=True) == {"phone_number": "+2348000000000"}


def test_update_schema_still_checks_provided_fields():
    errors = errors_of(SchemaKind.DRIVER_UPDATE, {"phoneNumber": "12"})
    assert errors == {"phoneNumber": "Invalid phone number format"}


def test_driver_update_does_not_require_future_expiry():
    data = validate(SchemaKind.DRIVER_UPDATE, {"licenseExpiryDate": past_iso(30)})
    assert data.license_expiry_date < datetime.now(timezone.utc)


def test_non_object_payload_rejected():
    errors = errors_of(SchemaKind.LOGIN, ["a@b.com", "secret"])
    assert errors == {"body": "Expected an object"}


def test_future_dates_accept_plain_dates():
    data = validate(SchemaKind.DRIVER_REGISTRATION, make_driver_payload(licenseExpiryDate=future_iso()[:10]))
    assert data.license_expiry_date.tzinfo is not None


@pytest.mark.parametrize("text,expected", [
    ("2030-05-01", datetime(2030, 5, 1, tzinfo=timezone.utc)),
    ("2030-05-01T10:30:00Z", datetime(2030, 5, 1, 10, 30, tzinfo=timezone.utc)),
    ("2030-05-01T10:30:00", datetime(2030, 5, 1, 10, 30, tzinfo=timezone.utc)),
    ("2030-05-01T11:30:00+01:00", datetime(2030, 5, 1, 10, 30, tzinfo=timezone.utc)),
    ("next tuesday", None),
])
def test_parse_datetime(text, expected):
    assert parse_datetime(text) == expected
