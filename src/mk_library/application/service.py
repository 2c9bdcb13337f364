"""LibraryApplicationService — the DM's personal item catalogue.

Library items are independent of markets. Deleting one removes every shop
binding that references it first; deleting a market or shop never touches
the library.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.errors import ForbiddenError, LibraryItemNotFoundError, LimitExceededError
from src.mk_common.limits import ITEMS_PER_LIBRARY
from src.mk_library.application.schemas import (
    CreateLibraryItemRequest,
    ItemUsageOut,
    LibraryItemOut,
    LibraryListResponse,
    UpdateLibraryItemRequest,
    build_list_response,
)
from src.mk_library.domain.models import LibraryItem
from src.mk_library.domain.repository import LibraryRepositoryProtocol
from src.mk_library.infrastructure.persistence import LibraryRepository
from src.mk_shop.domain.repository import ShopItemRepositoryProtocol
from src.mk_shop.infrastructure.persistence import ShopItemRepository

logger = logging.getLogger(__name__)


class LibraryApplicationService:
    def __init__(
        self,
        repo: LibraryRepositoryProtocol | None = None,
        shop_item_repo: ShopItemRepositoryProtocol | None = None,
    ) -> None:
        self._repo: LibraryRepositoryProtocol = repo or LibraryRepository()
        self._shop_items: ShopItemRepositoryProtocol = shop_item_repo or ShopItemRepository()

    async def get_owned(self, db: AsyncSession, dm_id: str, item_id: str) -> LibraryItem:
        item = await self._repo.get_by_id(db, item_id)
        if item is None:
            raise LibraryItemNotFoundError(item_id)
        if item.dm_id != dm_id:
            raise ForbiddenError("library item")
        return item

    async def create_item(
        self, db: AsyncSession, dm_id: str, body: CreateLibraryItemRequest
    ) -> LibraryItemOut:
        count = await self._repo.count_by_dm(db, dm_id)
        if count >= ITEMS_PER_LIBRARY:
            raise LimitExceededError(
                f"your library already holds the maximum of {ITEMS_PER_LIBRARY} items"
            )
        try:
            item = await self._repo.create(
                db, dm_id, body.item, body.source.value, body.official_id
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return LibraryItemOut.from_domain(item)

    async def get_item(self, db: AsyncSession, dm_id: str, item_id: str) -> LibraryItemOut:
        return LibraryItemOut.from_domain(await self.get_owned(db, dm_id, item_id))

    async def list_items(
        self,
        db: AsyncSession,
        dm_id: str,
        item_type: str | None = None,
        source: str | None = None,
        search: str | None = None,
    ) -> LibraryListResponse:
        items = await self._repo.list_by_dm(db, dm_id, item_type, source, search)
        unfiltered = item_type is None and source is None and not search
        total = len(items) if unfiltered else await self._repo.count_by_dm(db, dm_id)
        return build_list_response(items, total)

    async def update_item(
        self,
        db: AsyncSession,
        dm_id: str,
        item_id: str,
        body: UpdateLibraryItemRequest,
    ) -> LibraryItemOut:
        await self.get_owned(db, dm_id, item_id)
        try:
            updated = await self._repo.update(
                db,
                item_id,
                body.item,
                body.source.value if body.source else None,
                body.official_id,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise LibraryItemNotFoundError(item_id)
        return LibraryItemOut.from_domain(updated)

    async def delete_item(self, db: AsyncSession, dm_id: str, item_id: str) -> None:
        await self.get_owned(db, dm_id, item_id)
        try:
            removed = await self._shop_items.delete_by_library_item(db, item_id)
            await self._repo.delete(db, item_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Library item %s deleted (%d shop bindings removed)", item_id, removed)

    async def get_usage(self, db: AsyncSession, dm_id: str, item_id: str) -> ItemUsageOut:
        await self.get_owned(db, dm_id, item_id)
        return ItemUsageOut.from_domain(await self._repo.get_usage(db, item_id))
