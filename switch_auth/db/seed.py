# switch_auth/db/seed.py
import asyncio
import logging
import random
import string
from datetime import datetime, timezone, timedelta
from faker import Faker
from tqdm import tqdm

from switch_auth.core.exceptions import DuplicateEmailException
from switch_auth.db.session import connect_db_pool, get_pool, close_db_pool
from switch_auth.repositories.user_repo import IdentityRepository
from switch_auth.services.user_service import UserService

fake = Faker("en_US")
logger = logging.getLogger(__name__)

NUM_PASSENGERS = 30
NUM_DRIVERS = 15
DEMO_PASSWORD = "Switch123"


def random_phone() -> str:
    return f"+234{random.randint(7000000000, 9099999999)}"


def random_plate() -> str:
    letters = "".join(random.choices(string.ascii_uppercase, k=3))
    return f"{letters}-{random.randint(100, 999)}"


def future_iso(min_days: int = 90, max_days: int = 1500) -> str:
    moment = datetime.now(tz=timezone.utc) + timedelta(days=random.randint(min_days, max_days))
    return moment.isoformat()


def passenger_payload() -> dict:
    return {
        "email": fake.unique.email(),
        "password": DEMO_PASSWORD,
        "role": "passenger",
        "firstName": fake.first_name(),
        "lastName": fake.last_name(),
        "username": fake.unique.user_name(),
        "gender": random.choice(["male", "female", "other"]),
        "phoneNumber": random_phone(),
        "dateOfBirth": fake.date_of_birth(minimum_age=20, maximum_age=70).isoformat(),
        "preferredPaymentMethod": random.choice(["cash", "card", "wallet"]),
        "emergencyContact": {
            "name": fake.name(),
            "phoneNumber": random_phone(),
            "relationship": random.choice(["sibling", "parent", "spouse", "friend"]),
        },
    }


def driver_payload() -> dict:
    base_url = "https://files.switch.example/documents"
    return {
        "email": fake.unique.email(),
        "password": DEMO_PASSWORD,
        "role": "driver",
        "firstName": fake.first_name(),
        "lastName": fake.last_name(),
        "username": fake.unique.user_name(),
        "phoneNumber": random_phone(),
        "licenseNumber": f"DL-{fake.unique.random_number(digits=8, fix_len=True)}",
        "licenseExpiryDate": future_iso(),
        "vehicleDetails": {
            "make": random.choice(["Toyota", "Honda", "Hyundai", "Kia", "Ford"]),
            "model": random.choice(["Corolla", "Civic", "Elantra", "Rio", "Focus"]),
            "year": random.randint(2008, datetime.now(tz=timezone.utc).year),
            "color": fake.safe_color_name(),
            "licensePlate": random_plate(),
            "insuranceNumber": f"INS-{fake.random_number(digits=7, fix_len=True)}",
            "insuranceExpiryDate": future_iso(30, 700),
        },
        "bankDetails": {
            "accountNumber": str(fake.random_number(digits=10, fix_len=True)),
            "bankName": random.choice(["Access Bank", "GTBank", "Zenith Bank"]),
            "accountName": fake.name(),
        },
        "documents": {
            "driverLicense": f"{base_url}/{fake.uuid4()}/license.pdf",
            "vehicleRegistration": f"{base_url}/{fake.uuid4()}/registration.pdf",
            "insuranceCertificate": f"{base_url}/{fake.uuid4()}/insurance.pdf",
            "backgroundCheck": f"{base_url}/{fake.uuid4()}/background.pdf",
        },
    }


async def seed_users(user_svc: UserService, passengers: int = NUM_PASSENGERS, drivers: int = NUM_DRIVERS) -> int:
    created = 0
    for _ in tqdm(range(passengers), desc="Registering passengers"):
        try:
            await user_svc.register_passenger(passenger_payload())
            created += 1
        except DuplicateEmailException:
            continue
    for _ in tqdm(range(drivers), desc="Registering drivers"):
        try:
            await user_svc.register_driver(driver_payload())
            created += 1
        except DuplicateEmailException:
            continue
    return created


async def seed():
    await connect_db_pool()
    pool = await get_pool()
    if pool is None:
        raise RuntimeError("Database pool could not be initialized")

    async with pool.acquire() as conn:
        user_svc = UserService(IdentityRepository.from_connection(conn))
        created = await seed_users(user_svc)
        logger.info(f"✅ Seed finished: {created} users.")

    await close_db_pool()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
