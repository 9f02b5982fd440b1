"""
SQLAlchemy mixins for common model patterns.

These mixins provide reusable column definitions to follow DRY principles
and ensure consistency across all models.

    - IntegerIdMixin: Auto-incrementing integer primary key
    - TimestampMixin: Just timestamps (created_at, updated_at)
    - SoftDeleteMixin: Adds soft delete (deleted_at)
    - ConversationSessionMixin: Owner, title and embedded message log
"""
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
MessageLogType = JSON().with_variant(JSONB(), "postgresql")


def utc_now() -> datetime:
    return datetime.now(UTC)


class IntegerIdMixin:
    """
    Mixin for models using an integer primary key.

    Provides:
        - id: Integer primary key assigned by the database
    """

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    """
    Mixin for timestamp tracking.

    Provides:
        - created_at: Timestamp set on creation
        - updated_at: Timestamp refreshed on modification

    Note: Uses timezone-aware DateTime; values are set client-side so that
    consecutive writes within one database transaction still advance.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            nullable=False,
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            onupdate=utc_now,
            nullable=False,
        )


class SoftDeleteMixin:
    """
    Soft delete support (tombstone pattern).

    Provides:
        - deleted_at: Timestamp set on soft delete (null = not deleted)

    Query active only: .where(Model.deleted_at.is_(None))
    """

    @declared_attr
    def deleted_at(cls) -> Mapped[datetime | None]:
        return mapped_column(DateTime(timezone=True), nullable=True, index=True)


class ConversationSessionMixin(IntegerIdMixin, TimestampMixin):
    """
    Shared shape of vent and mediation sessions.

    Provides:
        - owner_id: Subject owning the session (immutable after creation)
        - title: Derived once at creation
        - messages: Ordered message log, list of {"role", "content", "sender"?}
        - message_count: Length of the log, used for compare-and-append
    """

    @declared_attr
    def owner_id(cls) -> Mapped[int]:
        return mapped_column(
            Integer,
            ForeignKey("subject.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def title(cls) -> Mapped[str]:
        return mapped_column(String(200), nullable=False)

    @declared_attr
    def messages(cls) -> Mapped[list[dict[str, Any]]]:
        return mapped_column(MessageLogType, nullable=False, default=list)

    @declared_attr
    def message_count(cls) -> Mapped[int]:
        return mapped_column(Integer, nullable=False, default=0)

    @declared_attr.directive
    def __table_args__(cls):
        return (
            Index(f"ix_{cls.__tablename__}_owner_updated", "owner_id", "updated_at"),
        )
