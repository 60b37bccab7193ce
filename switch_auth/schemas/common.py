import re
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, AnyUrl, BaseModel, BeforeValidator, ConfigDict, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

Role = Literal["passenger", "driver"]
Gender = Literal["male", "female", "other"]
PaymentMethod = Literal["cash", "card", "wallet"]

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_RE = re.compile(r"\+?[\d\s\-()]{10,}", re.ASCII)
LICENSE_PLATE_RE = re.compile(r"[A-Z0-9\s\-]{1,8}", re.ASCII)
PASSWORD_STRENGTH_RE = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)", re.ASCII)

DATE_NOT_FUTURE = "date_not_future"

MIN_VEHICLE_YEAR = 1990
MIN_AGE = 18
MAX_AGE = 100

_url_adapter = TypeAdapter(AnyUrl)
_datetime_adapter = TypeAdapter(datetime)


class CamelModel(BaseModel):
    """Payload shape: camelCase keys only, unknown keys dropped."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="ignore",
    )


class DocumentModel(CamelModel):
    """Stored records: camelCase on the wire, snake_case names in Python."""

    model_config = ConfigDict(populate_by_name=True)


class RegistrationModel(CamelModel):
    """Optional registration fields may be absent but never explicitly null."""

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            _fail("null_not_allowed", "Value must not be null")
        return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime string; naive values are taken as UTC."""
    if not isinstance(value, (str, datetime)):
        return None
    try:
        parsed = _datetime_adapter.validate_python(value.strip() if isinstance(value, str) else value)
    except PydanticValidationError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _fail(kind: str, message: str):
    raise PydanticCustomError(kind, message)


def min_length(size: int, message: str) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) < size:
            _fail("too_short", message)
        return value
    return AfterValidator(check)


def pattern(regex: re.Pattern, message: str) -> AfterValidator:
    def check(value: str) -> str:
        if not regex.fullmatch(value):
            _fail("pattern_mismatch", message)
        return value
    return AfterValidator(check)


def url(message: str = "Invalid url") -> AfterValidator:
    def check(value: str) -> str:
        try:
            _url_adapter.validate_python(value)
        except PydanticValidationError:
            _fail("url_parsing", message)
        # keep the caller's spelling, AnyUrl normalizes trailing slashes
        return value
    return AfterValidator(check)


def _check_password(value: str) -> str:
    if len(value) < 8:
        _fail("password_too_short", "Password must be at least 8 characters")
    if not PASSWORD_STRENGTH_RE.match(value):
        _fail(
            "password_too_weak",
            "Password must contain at least one uppercase letter, one lowercase letter, and one number",
        )
    return value


def any_date(message: str) -> BeforeValidator:
    def parse(value: Any) -> datetime:
        parsed = parse_datetime(value) if isinstance(value, str) else None
        if parsed is None:
            _fail("date_parsing", message)
        return parsed
    return BeforeValidator(parse)


def future_date(message: str) -> BeforeValidator:
    def parse(value: Any) -> datetime:
        parsed = parse_datetime(value) if isinstance(value, str) else None
        if parsed is None:
            _fail("date_parsing", message)
        if parsed <= utcnow():
            _fail(DATE_NOT_FUTURE, message)
        return parsed
    return BeforeValidator(parse)


def _parse_birth_date(value: Any) -> datetime:
    # whole-year arithmetic, birthdays later this year still count
    message = f"You must be between {MIN_AGE} and {MAX_AGE} years old"
    parsed = parse_datetime(value) if isinstance(value, str) else None
    if parsed is None:
        _fail("age_out_of_range", message)
    age = utcnow().year - parsed.year
    if age < MIN_AGE or age > MAX_AGE:
        _fail("age_out_of_range", message)
    return parsed


def _check_vehicle_year(value: int) -> int:
    if value < MIN_VEHICLE_YEAR:
        _fail("year_too_old", f"Vehicle year must be {MIN_VEHICLE_YEAR} or later")
    if value > utcnow().year + 1:
        _fail("year_in_future", "Vehicle year cannot be in the future")
    return value


def _require_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _fail("number_type", "Vehicle year must be a number")
    if isinstance(value, float):
        if not value.is_integer():
            _fail("int_type", "Vehicle year must be a whole number")
        return int(value)
    return value


Email = Annotated[str, pattern(EMAIL_RE, "Invalid email format")]
Password = Annotated[str, AfterValidator(_check_password)]
PhoneNumber = Annotated[str, pattern(PHONE_RE, "Invalid phone number format")]
BirthDate = Annotated[datetime, BeforeValidator(_parse_birth_date)]
Url = Annotated[str, url()]
VehicleYear = Annotated[int, BeforeValidator(_require_number), AfterValidator(_check_vehicle_year)]
LicensePlate = Annotated[str, pattern(LICENSE_PLATE_RE, "Invalid license plate format")]
