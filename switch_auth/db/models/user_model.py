from sqlalchemy import Column, String, text
from sqlalchemy.dialects.postgresql import JSONB
from switch_auth.db.base import Base


class PartitionMixin:
    """One role partition: a JSONB profile document plus the columns we index on."""

    id = Column(String(36), primary_key=True, server_default=text("gen_random_uuid()::text"))
    # UNIQUE per partition, so the same email may exist once as each role
    email = Column(String(254), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    document = Column(JSONB, nullable=False, server_default=text("'{}'::jsonb"))


class PassengerRecord(PartitionMixin, Base):
    __tablename__ = "passengers"


class DriverRecord(PartitionMixin, Base):
    __tablename__ = "drivers"
