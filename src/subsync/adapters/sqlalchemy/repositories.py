"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, Unpack

from sqlalchemy import insert, select, update

from subsync.adapters.sqlalchemy.tables import subscription_table, user_table
from subsync.domain.clock import utcnow
from subsync.domain.model import NON_TERMINAL_STATUSES, Subscription, SubscriptionStatus, User

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy import Row, Select
    from sqlalchemy.orm import Session

    from subsync.domain.model import UserMode
    from subsync.domain.ports.persistence import SubscriptionFields

_WRITABLE_SUBSCRIPTION_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "status",
        "cancel_at_period_end",
        "grace_period_ends_at",
        "current_period_start",
        "current_period_end",
        "canceled_at",
    }
)


def _subscription_select() -> Select[tuple[object, ...]]:
    return select(
        subscription_table,
        user_table.c.mode.label("user_mode"),
    ).join(user_table, user_table.c.id == subscription_table.c.user_id)


def _row_to_subscription(row: Row[tuple[object, ...]]) -> Subscription:
    data = row._mapping  # noqa: SLF001
    return Subscription(
        id=data["id"],
        user_id=data["user_id"],
        external_id=data["external_id"],
        status=SubscriptionStatus(data["status"]),
        cancel_at_period_end=bool(data["cancel_at_period_end"]),
        current_period_start=data["current_period_start"],
        current_period_end=data["current_period_end"],
        grace_period_ends_at=data["grace_period_ends_at"],
        canceled_at=data["canceled_at"],
        updated_at=data["updated_at"],
        user_mode=data["user_mode"],
    )


class SqlAlchemySubscriptionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, subscription: Subscription) -> None:
        self.session.execute(
            insert(subscription_table).values(
                id=subscription.id,
                user_id=subscription.user_id,
                external_id=subscription.external_id,
                status=subscription.status,
                cancel_at_period_end=subscription.cancel_at_period_end,
                current_period_start=subscription.current_period_start,
                current_period_end=subscription.current_period_end,
                grace_period_ends_at=subscription.grace_period_ends_at,
                canceled_at=subscription.canceled_at,
                updated_at=subscription.updated_at or utcnow(),
            )
        )

    def get(self, subscription_id: uuid.UUID) -> Subscription | None:
        stmt = _subscription_select().where(subscription_table.c.id == subscription_id)
        row = self.session.execute(stmt).one_or_none()
        return None if row is None else _row_to_subscription(row)

    def find_due_for_sweep(self, now: datetime) -> Sequence[Subscription]:
        stmt = (
            _subscription_select()
            .where(subscription_table.c.status == SubscriptionStatus.PAST_DUE)
            .where(subscription_table.c.grace_period_ends_at.is_not(None))
            .where(subscription_table.c.grace_period_ends_at <= now)
            .order_by(subscription_table.c.grace_period_ends_at)
        )
        return [_row_to_subscription(row) for row in self.session.execute(stmt)]

    def find_syncable(self) -> Sequence[Subscription]:
        stmt = (
            _subscription_select()
            .where(subscription_table.c.status.in_(sorted(NON_TERMINAL_STATUSES)))
            .order_by(subscription_table.c.updated_at, subscription_table.c.id)
        )
        return [_row_to_subscription(row) for row in self.session.execute(stmt)]

    def update_subscription(
        self,
        subscription_id: uuid.UUID,
        **fields: Unpack[SubscriptionFields],
    ) -> bool:
        unknown = set(fields) - _WRITABLE_SUBSCRIPTION_FIELDS
        if unknown:
            raise ValueError(f"Unsupported subscription fields: {sorted(unknown)}")
        stmt = (
            update(subscription_table)
            .where(subscription_table.c.id == subscription_id)
            .values(**fields, updated_at=utcnow())
        )
        result = self.session.execute(stmt)
        return result.rowcount > 0


class SqlAlchemyUserRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, user: User) -> None:
        now = utcnow()
        self.session.execute(
            insert(user_table).values(
                id=user.id,
                email=user.email,
                mode=user.mode,
                created_at=user.created_at or now,
                updated_at=user.updated_at or now,
            )
        )

    def get_by_email(self, email: str) -> User | None:
        stmt = select(user_table).where(user_table.c.email == email)
        row = self.session.execute(stmt).one_or_none()
        if row is None:
            return None
        data = row._mapping  # noqa: SLF001
        return User(
            id=data["id"],
            email=data["email"],
            mode=data["mode"],
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    def get_mode(self, user_id: uuid.UUID) -> UserMode | None:
        stmt = select(user_table.c.mode).where(user_table.c.id == user_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def update_user_mode(self, user_id: uuid.UUID, mode: UserMode) -> bool:
        stmt = (
            update(user_table)
            .where(user_table.c.id == user_id)
            .values(mode=mode, updated_at=utcnow())
        )
        result = self.session.execute(stmt)
        return result.rowcount > 0


if TYPE_CHECKING:
    from subsync.domain.ports.persistence import SubscriptionRepository, UserRepository

    def _check_protocols(session: Session) -> None:
        _subscriptions: SubscriptionRepository = SqlAlchemySubscriptionRepository(session)
        _users: UserRepository = SqlAlchemyUserRepository(session)
