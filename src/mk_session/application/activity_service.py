"""PlayerActivityService — what players did, as seen from the DM dashboard.

The log is a courtesy view: it never holds currency and it is dropped when
the market deactivates.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.datetime_utils import utc_now
from src.mk_common.enums import TransactionType
from src.mk_common.errors import PlayerSessionNotFoundError
from src.mk_session.domain.activity import format_transactions
from src.mk_session.domain.models import PlayerSession, Transaction
from src.mk_session.domain.repository import PlayerSessionRepositoryProtocol
from src.mk_session.infrastructure.persistence import PlayerSessionRepository

logger = logging.getLogger(__name__)


class PlayerActivityService:
    def __init__(self, repo: PlayerSessionRepositoryProtocol | None = None) -> None:
        self._repo: PlayerSessionRepositoryProtocol = repo or PlayerSessionRepository()

    async def create_session(
        self, db: AsyncSession, market_id: str, player_name: str
    ) -> PlayerSession:
        try:
            session = await self._repo.create(db, market_id, player_name, utc_now())
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Player %r entered market %s (session %s)", player_name, market_id, session.id)
        return session

    async def add_transaction(
        self,
        db: AsyncSession,
        session_id: str,
        type: TransactionType,
        item_name: str = "",
        quantity: int = 1,
    ) -> Transaction:
        transaction = Transaction(
            type=type.value, item_name=item_name, quantity=quantity, timestamp=utc_now()
        )
        try:
            found = await self._repo.append_transaction(db, session_id, transaction)
            if not found:
                raise PlayerSessionNotFoundError(session_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return transaction

    async def get_session(self, db: AsyncSession, session_id: str) -> PlayerSession:
        session = await self._repo.get_by_id(db, session_id)
        if session is None:
            raise PlayerSessionNotFoundError(session_id)
        return session

    async def list_market_sessions(
        self, db: AsyncSession, market_id: str
    ) -> list[PlayerSession]:
        """Most recent activity first."""
        return await self._repo.list_by_market(db, market_id)

    @staticmethod
    def format_transactions(transactions: list[Transaction]) -> str:
        return format_transactions(transactions)

    async def delete_market_sessions(self, db: AsyncSession, market_id: str) -> int:
        """Delete the market's log. The caller owns the transaction."""
        return await self._repo.delete_by_market(db, market_id)
