from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from align.domain.enums import SubjectRole
from align.infrastructure.persistence.models.subject import Subject
from align.infrastructure.persistence.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    return email.strip().lower()


class SubjectRepository(BaseRepository[Subject]):
    """Repository for Subject lookups (SRP - data access only)"""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Subject)

    async def get_active_by_id(self, subject_id: int) -> Subject | None:
        """Get a subject by ID, treating soft-deleted subjects as missing"""
        result = await self.db.execute(
            select(Subject).where(Subject.id == subject_id, Subject.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_active_by_email(self, email: str) -> Subject | None:
        """Get a subject by case-normalized email, ignoring soft-deleted subjects"""
        result = await self.db.execute(
            select(Subject).where(
                Subject.email == normalize_email(email), Subject.deleted_at.is_(None)
            )
        )
        return result.scalar_one_or_none()

    async def create_subject(
        self,
        email: str,
        password_hash: str,
        name: str | None = None,
        role: SubjectRole = SubjectRole.MEMBER,
    ) -> Subject:
        """Create a subject. The caller hashes the credential."""
        subject = Subject(
            email=normalize_email(email),
            password_hash=password_hash,
            name=name,
            role=role.value,
        )
        return await self.create(subject)
