"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    async def count_by_dm(self, db: AsyncSession, dm_id: str) -> int: ...

    async def create(
        self,
        db: AsyncSession,
        dm_id: str,
        name: str,
        description: str,
        access_code: str,
    ) -> Market: ...

    async def get_by_id(self, db: AsyncSession, market_id: str) -> Market | None: ...

    async def get_by_access_code(
        self, db: AsyncSession, access_code: str
    ) -> Market | None: ...

    async def get_active_by_dm(self, db: AsyncSession, dm_id: str) -> Market | None: ...

    async def list_by_dm(self, db: AsyncSession, dm_id: str) -> list[Market]: ...

    async def update_details(
        self,
        db: AsyncSession,
        market_id: str,
        name: str | None,
        description: str | None,
    ) -> Market | None: ...

    async def set_active(
        self, db: AsyncSession, market_id: str, active_until: datetime
    ) -> Market | None: ...

    async def set_inactive(self, db: AsyncSession, market_id: str) -> Market | None: ...

    async def delete(self, db: AsyncSession, market_id: str) -> None: ...
