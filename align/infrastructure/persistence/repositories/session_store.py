from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError

from align.domain.enums import SessionKind
from align.domain.exceptions import PersistenceError
from align.infrastructure.persistence.database import Database
from align.infrastructure.persistence.repositories.session_repo import (
    ConversationSessionRepository,
)


class SqlSessionStore:
    """
    Session store over the shared Database.

    Each `sessions()` block is its own transaction, so the pipeline can read
    before the model call and write after it without holding a transaction
    open while the model is drafting.
    """

    def __init__(self, database: Database):
        self.database = database

    @asynccontextmanager
    async def sessions(self, kind: SessionKind) -> AsyncIterator[ConversationSessionRepository]:
        try:
            async with self.database.transaction() as db:
                yield ConversationSessionRepository(db, kind)
        except SQLAlchemyError as e:
            # Commit-time failures surface here, outside the repository
            raise PersistenceError("commit", type(e).__name__) from e
