import asyncio
import copy
import json
import os
import uuid
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault("JWT_SECRET", "TEST_JWT_SECRET_CHANGE_ME")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from fastapi import FastAPI
from fastapi.testclient import TestClient

from switch_auth.api.v1 import routers
from switch_auth.api.v1.deps import get_identity_repo
from switch_auth.core.exceptions import DuplicateEmailException
from switch_auth.main import install_handlers
from switch_auth.repositories.user_repo import IMMUTABLE_FIELDS, PARTITIONS, IdentityRepository, StoredUser
from switch_auth.services.user_service import UserService


class InMemoryPartition:
    """Stand-in for PartitionRepository with the same UNIQUE(email) behaviour."""

    def __init__(self, role: str):
        self.role = role
        self.table, self.model = PARTITIONS[role]
        self.rows = {}
        self.calls = []
        # yield to the loop on lookups so concurrent registrations interleave
        self.yield_on_lookup = False

    def _to_stored(self, user_id: str) -> StoredUser:
        row = self.rows[user_id]
        document = copy.deepcopy(row["document"])
        document.update(id=user_id, email=row["email"], role=self.role)
        return StoredUser(user=self.model.model_validate(document), password_hash=row["password_hash"])

    def document(self, user_id: str) -> dict:
        return copy.deepcopy(self.rows[user_id]["document"])

    async def find_by_email(self, email):
        self.calls.append("find_by_email")
        if self.yield_on_lookup:
            await asyncio.sleep(0)
        for user_id, row in self.rows.items():
            if row["email"] == email:
                return self._to_stored(user_id)
        return None

    async def find_by_id(self, user_id):
        self.calls.append("find_by_id")
        return self._to_stored(user_id) if user_id in self.rows else None

    async def list_all(self):
        self.calls.append("list_all")
        return [self._to_stored(user_id) for user_id in self.rows]

    async def insert(self, user, password_hash):
        self.calls.append("insert")
        if any(row["email"] == user.email for row in self.rows.values()):
            raise DuplicateEmailException()
        document = json.loads(json.dumps(user.model_dump(mode="json", by_alias=True, exclude_none=True)))
        document.pop("id", None)
        user_id = str(uuid.uuid4())
        self.rows[user_id] = {"email": user.email, "password_hash": password_hash, "document": document}
        return user_id

    async def update(self, user_id, changes):
        self.calls.append("update")
        if user_id not in self.rows:
            return None
        changes = {k: v for k, v in changes.items() if k not in IMMUTABLE_FIELDS}
        self.rows[user_id]["document"].update(json.loads(json.dumps(changes)))
        return self._to_stored(user_id)

    async def delete(self, user_id):
        self.calls.append("delete")
        return self.rows.pop(user_id, None) is not None


def run(coro):
    return asyncio.run(coro)


def future_iso(days: int = 365) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def past_iso(days: int = 1) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


def make_passenger_payload(**overrides) -> dict:
    payload = {
        "email": "a@b.com",
        "password": "Abcdefg1",
        "firstName": "John",
        "lastName": "Doe",
        "username": "jd",
        "phoneNumber": "+2348012345678",
        "role": "passenger",
    }
    payload.update(overrides)
    return payload


def make_driver_payload(**overrides) -> dict:
    payload = {
        "email": "driver@example.com",
        "password": "Driver123",
        "role": "driver",
        "firstName": "Ada",
        "lastName": "Obi",
        "username": "adaobi",
        "phoneNumber": "+234 801-234-5678",
        "licenseNumber": "LIC-12345",
        "licenseExpiryDate": future_iso(),
        "vehicleDetails": {
            "make": "Toyota",
            "model": "Corolla",
            "year": 2020,
            "color": "Blue",
            "licensePlate": "ABC-123",
            "insuranceNumber": "INS-98765",
            "insuranceExpiryDate": future_iso(200),
        },
        "documents": {
            "driverLicense": "https://docs.example.com/license.pdf",
            "vehicleRegistration": "https://docs.example.com/registration.pdf",
            "insuranceCertificate": "https://docs.example.com/insurance.pdf",
            "backgroundCheck": "https://docs.example.com/background.pdf",
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def repo() -> IdentityRepository:
    return IdentityRepository(InMemoryPartition("passenger"), InMemoryPartition("driver"))


@pytest.fixture
def service(repo) -> UserService:
    return UserService(repo)


@pytest.fixture
def app_instance(repo) -> FastAPI:
    app = FastAPI()
    install_handlers(app)
    app.include_router(routers.router)
    app.dependency_overrides[get_identity_repo] = lambda: repo
    return app


@pytest.fixture
def client(app_instance) -> TestClient:
    # no context manager: the lifespan would try to open the asyncpg pool
    return TestClient(app_instance)
