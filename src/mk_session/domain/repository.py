"""Repository Protocols for session stock (Redis) and the player activity log.

Unit tests inject mocks or in-memory fakes that conform to these Protocols.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_session.domain.models import PlayerSession, SessionStock, Transaction


class SessionStockRepositoryProtocol(Protocol):
    async def replace_all(
        self, market_id: str, entries: SessionStock, ttl_seconds: int
    ) -> None: ...

    async def get_all(self, market_id: str) -> SessionStock: ...

    async def get_entry(
        self, market_id: str, shop_item_id: str
    ) -> tuple[bool, int | None]:
        """(exists, value). value None with exists True means unlimited."""
        ...

    async def set_entry(
        self, market_id: str, shop_item_id: str, value: int | None
    ) -> None: ...

    async def clear(self, market_id: str) -> None: ...


class PlayerSessionRepositoryProtocol(Protocol):
    async def create(
        self, db: AsyncSession, market_id: str, player_name: str, now: datetime
    ) -> PlayerSession: ...

    async def get_by_id(self, db: AsyncSession, session_id: str) -> PlayerSession | None: ...

    async def append_transaction(
        self, db: AsyncSession, session_id: str, transaction: Transaction
    ) -> bool: ...

    async def list_by_market(self, db: AsyncSession, market_id: str) -> list[PlayerSession]: ...

    async def delete_by_market(self, db: AsyncSession, market_id: str) -> int: ...
