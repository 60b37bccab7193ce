import logging
from dataclasses import dataclass
from typing import Any, List, Union

from starlette.concurrency import run_in_threadpool

from switch_auth.core.exceptions import (
    DuplicateEmailException, ExpiredInsuranceException, ExpiredLicenseException,
    InvalidCredentialsException, NotFoundException,
)
from switch_auth.core.security import create_access_token, hash_password, verify_password
from switch_auth.repositories.user_repo import IdentityRepository, PartitionRepository
from switch_auth.schemas.auth_schema import DriverCreate, PassengerCreate, TokenClaims, UserLogin
from switch_auth.schemas.common import Role, utcnow
from switch_auth.schemas.user_schema import (
    BankDetails, Driver, DriverDocuments, EmergencyContact, Passenger, VehicleDetails,
)
from switch_auth.schemas.validation import SchemaKind, validate

logger = logging.getLogger(__name__)

AnyUser = Union[Passenger, Driver]


@dataclass
class LoginResult:
    user: AnyUser
    token: str


class UserService:
    """Registration, login and profile management over both role partitions.

    Every value returned from here is a ``Passenger`` or ``Driver`` model,
    which has no credential field, so hashes cannot leak into responses.
    """

    def __init__(self, repo: IdentityRepository):
        self.repo = repo

    # ------------------ Registration ------------------ #

    async def _ensure_email_free(self, partition: PartitionRepository, email: str):
        if await partition.find_by_email(email):
            logger.info("Rejected duplicate %s registration for %s", partition.role, email)
            raise DuplicateEmailException()

    async def register_passenger(self, payload: Any) -> Passenger:
        data: PassengerCreate = validate(SchemaKind.PASSENGER_REGISTRATION, payload)
        await self._ensure_email_free(self.repo.passengers, data.email)

        hashed_password = await run_in_threadpool(hash_password, data.password)
        now = utcnow()
        passenger = Passenger(
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            username=data.username,
            gender=data.gender,
            phone_number=data.phone_number,
            date_of_birth=data.date_of_birth,
            profile_picture=data.profile_picture or "",
            preferred_payment_method=data.preferred_payment_method or "cash",
            wallet_balance=0,
            is_active=True,
            emergency_contact=(
                EmergencyContact(**data.emergency_contact.model_dump())
                if data.emergency_contact else EmergencyContact()
            ),
            created_at=now,
            updated_at=now,
        )
        user_id = await self.repo.passengers.insert(passenger, hashed_password)
        logger.info("Registered passenger %s", user_id)
        return passenger.model_copy(update={"id": user_id})

    async def register_driver(self, payload: Any) -> Driver:
        data: DriverCreate = validate(SchemaKind.DRIVER_REGISTRATION, payload)
        await self._ensure_email_free(self.repo.drivers, data.email)

        # validation already saw these in the future, re-check against the clock now
        now = utcnow()
        if data.license_expiry_date <= now:
            raise ExpiredLicenseException()
        if data.vehicle_details.insurance_expiry_date <= now:
            raise ExpiredInsuranceException()

        hashed_password = await run_in_threadpool(hash_password, data.password)
        driver = Driver(
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            phone_number=data.phone_number,
            date_of_birth=data.date_of_birth,
            profile_picture=data.profile_picture or "",
            license_number=data.license_number,
            license_expiry_date=data.license_expiry_date,
            vehicle_details=VehicleDetails(**data.vehicle_details.model_dump()),
            rating=0,
            total_rides=0,
            is_active=True,
            is_available=False,
            bank_details=(
                BankDetails(**data.bank_details.model_dump()) if data.bank_details else BankDetails()
            ),
            documents=DriverDocuments(**data.documents.model_dump()),
            created_at=now,
            updated_at=now,
        )
        user_id = await self.repo.drivers.insert(driver, hashed_password)
        logger.info("Registered driver %s", user_id)
        return driver.model_copy(update={"id": user_id})

    # ------------------ Authentication ------------------ #

    async def login(self, payload: Any) -> LoginResult:
        data: UserLogin = validate(SchemaKind.LOGIN, payload)
        stored = await self.repo.find_by_email(data.email)
        # same error for unknown email, missing credential and wrong password
        if stored is None or not stored.password_hash:
            logger.info("Login failed for %s", data.email)
            raise InvalidCredentialsException()
        if not await run_in_threadpool(verify_password, data.password, stored.password_hash):
            logger.info("Login failed for %s", data.email)
            raise InvalidCredentialsException()

        user = stored.user
        token = create_access_token(TokenClaims(id=user.id, email=user.email, role=user.role))
        return LoginResult(user=user, token=token)

    # ------------------ Profiles ------------------ #

    async def get_profile(self, user_id: str) -> AnyUser:
        stored = await self.repo.find_by_id(user_id)
        if stored is None:
            raise NotFoundException("User")
        return stored.user

    async def _update(self, role: Role, kind: SchemaKind, user_id: str, payload: Any) -> AnyUser:
        partition = self.repo.partition(role)
        existing = await partition.find_by_id(user_id)
        if existing is None:
            raise NotFoundException(role.capitalize())

        changes = validate(kind, payload).model_dump(
            mode="json", by_alias=True, exclude_unset=True, exclude_none=True,
        )
        changes["updatedAt"] = utcnow().isoformat()

        updated = await partition.update(user_id, changes)
        if updated is None:
            raise NotFoundException(role.capitalize())
        return updated.user

    async def update_passenger(self, user_id: str, payload: Any) -> Passenger:
        return await self._update("passenger", SchemaKind.PASSENGER_UPDATE, user_id, payload)

    async def update_driver(self, user_id: str, payload: Any) -> Driver:
        return await self._update("driver", SchemaKind.DRIVER_UPDATE, user_id, payload)

    # ------------------ Administration ------------------ #

    async def delete_by_id(self, user_id: str) -> bool:
        deleted = await self.repo.delete_by_id(user_id)
        if deleted:
            logger.info("Deleted user %s", user_id)
        return deleted

    async def list_by_role(self, role: Role) -> List[AnyUser]:
        return [stored.user for stored in await self.repo.partition(role).list_all()]

    async def list_all(self) -> List[AnyUser]:
        return [stored.user for stored in await self.repo.list_all()]
