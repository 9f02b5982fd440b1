from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from align.domain.enums import SubjectRole
from align.infrastructure.persistence.database import Base
from align.infrastructure.persistence.models.mixins import (
    IntegerIdMixin,
    SoftDeleteMixin,
    TimestampMixin,
)


class Subject(IntegerIdMixin, TimestampMixin, SoftDeleteMixin, Base):
    """
    Authenticated account owning vent and mediation sessions.

    Subjects are created out of band (scripts/create_subject.py) and are
    read-only to the conversation pipeline. A soft-deleted subject is
    treated as non-existent by every lookup.
    """

    __tablename__ = "subject"

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubjectRole.MEMBER.value
    )
