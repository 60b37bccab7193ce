import json
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from asyncpg import Connection, InterfaceError, PostgresError, UniqueViolationError

from switch_auth.core.exceptions import DuplicateEmailException, StoreException
from switch_auth.schemas.common import Role
from switch_auth.schemas.user_schema import Driver, Passenger

logger = logging.getLogger(__name__)

PARTITIONS = {
    "passenger": ("passengers", Passenger),
    "driver": ("drivers", Driver),
}

STORE_ERRORS = (PostgresError, InterfaceError, OSError)

IMMUTABLE_FIELDS = frozenset({"id", "email", "role", "password", "passwordHash"})


@dataclass
class StoredUser:
    """A user as read from its partition, with the credential kept beside it."""
    user: Union[Passenger, Driver]
    password_hash: Optional[str] = None


class PartitionRepository:
    """One role's collection: a table of JSONB documents keyed by a generated id."""

    def __init__(self, conn: Connection, role: Role):
        self.conn = conn
        self.role = role
        self.table, self.model = PARTITIONS[role]

    # ------------------ Helpers ------------------ #

    def _to_stored(self, record) -> StoredUser:
        # asyncpg hands jsonb back as text
        document = json.loads(record["document"])
        # role always comes from the partition, not from the document
        document.update(id=record["id"], email=record["email"], role=self.role)
        return StoredUser(
            user=self.model.model_validate(document),
            password_hash=record["password_hash"],
        )

    async def _fetchrow(self, operation: str, sql: str, *args):
        try:
            return await self.conn.fetchrow(sql, *args)
        except STORE_ERRORS as e:
            logger.error("%s.%s failed: %s", self.table, operation, e)
            raise StoreException(operation) from e

    # ------------------ Retrieval Methods ------------------ #

    async def find_by_email(self, email: str) -> Optional[StoredUser]:
        sql = f"SELECT * FROM {self.table} WHERE email = $1 LIMIT 1;"
        record = await self._fetchrow("find_by_email", sql, email)
        return self._to_stored(record) if record else None

    async def find_by_id(self, user_id: str) -> Optional[StoredUser]:
        sql = f"SELECT * FROM {self.table} WHERE id = $1;"
        record = await self._fetchrow("find_by_id", sql, user_id)
        return self._to_stored(record) if record else None

    async def list_all(self) -> List[StoredUser]:
        sql = f"SELECT * FROM {self.table} ORDER BY document->>'createdAt', id;"
        try:
            records = await self.conn.fetch(sql)
        except STORE_ERRORS as e:
            logger.error("%s.list_all failed: %s", self.table, e)
            raise StoreException("list_all") from e
        return [self._to_stored(record) for record in records]

    # ------------------ Creation ------------------ #

    async def insert(self, user: Union[Passenger, Driver], password_hash: str) -> str:
        document = user.model_dump(mode="json", by_alias=True, exclude_none=True)
        document.pop("id", None)
        sql = f"""
            INSERT INTO {self.table} (email, password_hash, document)
            VALUES ($1, $2, $3::jsonb)
            RETURNING id;
        """
        try:
            record = await self.conn.fetchrow(sql, user.email, password_hash, json.dumps(document))
        except UniqueViolationError:
            # lost the race against a concurrent registration
            raise DuplicateEmailException()
        except STORE_ERRORS as e:
            logger.error("%s.insert failed: %s", self.table, e)
            raise StoreException("insert") from e
        return str(record["id"])

    # ------------------ Update / Delete ------------------ #

    async def update(self, user_id: str, changes: dict) -> Optional[StoredUser]:
        """Shallow-merge ``changes`` (camelCase, JSON-safe) into the stored document."""
        changes = {key: value for key, value in changes.items() if key not in IMMUTABLE_FIELDS}
        sql = f"""
            UPDATE {self.table}
            SET document = document || $2::jsonb
            WHERE id = $1
            RETURNING *;
        """
        record = await self._fetchrow("update", sql, user_id, json.dumps(changes))
        return self._to_stored(record) if record else None

    async def delete(self, user_id: str) -> bool:
        sql = f"DELETE FROM {self.table} WHERE id = $1 RETURNING id;"
        record = await self._fetchrow("delete", sql, user_id)
        return record is not None


class IdentityRepository:
    """Both partitions plus the role-agnostic lookups (passengers are probed first)."""

    def __init__(self, passengers: PartitionRepository, drivers: PartitionRepository):
        self.passengers = passengers
        self.drivers = drivers

    @classmethod
    def from_connection(cls, conn: Connection) -> "IdentityRepository":
        return cls(PartitionRepository(conn, "passenger"), PartitionRepository(conn, "driver"))

    def partition(self, role: Role) -> PartitionRepository:
        if role == "passenger":
            return self.passengers
        if role == "driver":
            return self.drivers
        raise ValueError(f"Unknown role: {role}")

    def _in_probe_order(self) -> Iterable[PartitionRepository]:
        return (self.passengers, self.drivers)

    async def find_by_email(self, email: str) -> Optional[StoredUser]:
        for partition in self._in_probe_order():
            found = await partition.find_by_email(email)
            if found:
                return found
        return None

    async def find_by_id(self, user_id: str) -> Optional[StoredUser]:
        for partition in self._in_probe_order():
            found = await partition.find_by_id(user_id)
            if found:
                return found
        return None

    async def delete_by_id(self, user_id: str) -> bool:
        for partition in self._in_probe_order():
            if await partition.find_by_id(user_id):
                return await partition.delete(user_id)
        return False

    async def list_all(self) -> List[StoredUser]:
        users = []
        for partition in self._in_probe_order():
            users.extend(await partition.list_all())
        return users
