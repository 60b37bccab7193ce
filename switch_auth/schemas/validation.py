from enum import Enum
from typing import Any, Dict, List, Type

from pydantic import BaseModel, ValidationError

from switch_auth.core.exceptions import (
    ExpiredInsuranceException, ExpiredLicenseException, FieldError, PayloadValidationException,
)
from switch_auth.schemas.auth_schema import (
    DriverCreate, DriverUpdate, PassengerCreate, PassengerUpdate, UserLogin,
)
from switch_auth.schemas.common import DATE_NOT_FUTURE


class SchemaKind(str, Enum):
    PASSENGER_REGISTRATION = "passenger_registration"
    DRIVER_REGISTRATION = "driver_registration"
    LOGIN = "login"
    PASSENGER_UPDATE = "passenger_update"
    DRIVER_UPDATE = "driver_update"


SCHEMAS: Dict[SchemaKind, Type[BaseModel]] = {
    SchemaKind.PASSENGER_REGISTRATION: PassengerCreate,
    SchemaKind.DRIVER_REGISTRATION: DriverCreate,
    SchemaKind.LOGIN: UserLogin,
    SchemaKind.PASSENGER_UPDATE: PassengerUpdate,
    SchemaKind.DRIVER_UPDATE: DriverUpdate,
}

LICENSE_EXPIRY_FIELD = "licenseExpiryDate"
INSURANCE_EXPIRY_FIELD = "vehicleDetails.insuranceExpiryDate"


def field_errors(exc: ValidationError) -> List[FieldError]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        errors.append(FieldError(field=field, message=err["msg"], code=err["type"]))
    return errors


def _expired(errors: List[FieldError], field: str) -> bool:
    return any(e.field == field and e.code == DATE_NOT_FUTURE for e in errors)


def _raise_for(kind: SchemaKind, errors: List[FieldError]):
    # a well-formed but past expiry date is its own business error
    if kind is SchemaKind.DRIVER_REGISTRATION:
        if _expired(errors, LICENSE_EXPIRY_FIELD):
            raise ExpiredLicenseException(errors)
        if _expired(errors, INSURANCE_EXPIRY_FIELD):
            raise ExpiredInsuranceException(errors)
    raise PayloadValidationException(errors)


def validate(kind: SchemaKind, payload: Any) -> BaseModel:
    """Normalize ``payload`` against the schema for ``kind``.

    Raises ``PayloadValidationException`` (or one of its expired-document
    subclasses) listing every violated field, not just the first.
    """
    schema = SCHEMAS[kind]
    if isinstance(payload, schema):
        return payload
    if not isinstance(payload, dict):
        raise PayloadValidationException([FieldError(field="body", message="Expected an object", code="type")])
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        _raise_for(kind, field_errors(e))
