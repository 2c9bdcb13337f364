"""Repository Protocol for the DM item library.

Unit tests inject a mock that conforms to this Protocol.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_library.domain.models import ItemUsage, LibraryItem


class LibraryRepositoryProtocol(Protocol):
    async def count_by_dm(self, db: AsyncSession, dm_id: str) -> int: ...

    async def create(
        self,
        db: AsyncSession,
        dm_id: str,
        item: dict[str, Any],
        source: str,
        official_id: str | None,
    ) -> LibraryItem: ...

    async def get_by_id(self, db: AsyncSession, item_id: str) -> LibraryItem | None: ...

    async def list_by_dm(
        self,
        db: AsyncSession,
        dm_id: str,
        item_type: str | None,
        source: str | None,
        search: str | None,
    ) -> list[LibraryItem]: ...

    async def update(
        self,
        db: AsyncSession,
        item_id: str,
        item: dict[str, Any] | None,
        source: str | None,
        official_id: str | None,
    ) -> LibraryItem | None: ...

    async def delete(self, db: AsyncSession, item_id: str) -> None: ...

    async def get_usage(self, db: AsyncSession, item_id: str) -> ItemUsage: ...
