"""SQLAlchemy table metadata for the billing store."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    TypeDecorator,
    Uuid,
)

from subsync.domain.model import SubscriptionStatus, UserMode

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

user_table = Table(
    "user_account",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email", String, nullable=True, unique=True),
    Column(
        "mode",
        Enum(UserMode, native_enum=False, length=16, name="user_mode"),
        nullable=False,
        default=UserMode.RESTRICTED,
    ),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
)

subscription_table = Table(
    "subscription",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "user_id",
        UUIDColumnType,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("external_id", String, nullable=False, unique=True),
    Column(
        "status",
        Enum(SubscriptionStatus, native_enum=False, length=16, name="subscription_status"),
        nullable=False,
    ),
    Column("cancel_at_period_end", Boolean, nullable=False, default=False),
    Column("current_period_start", UTCDateTime(), nullable=True),
    Column("current_period_end", UTCDateTime(), nullable=True),
    Column("grace_period_ends_at", UTCDateTime(), nullable=True),
    Column("canceled_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
    Index("ix_subscription_user_id", "user_id", unique=True),
    Index("ix_subscription_status_grace_period_ends_at", "status", "grace_period_ends_at"),
)


__all__ = ["UTCDateTime", "metadata", "subscription_table", "user_table"]
