"""DM account service: register, login, refresh.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
)
from src.mk_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.mk_gateway.auth.password import hash_password, verify_password
from src.mk_gateway.dm.db_models import DMModel

logger = logging.getLogger(__name__)


class DMAccountService:
    """Stateless service — instantiate once, reuse across requests."""

    async def register(
        self,
        email: str,
        display_name: str,
        password: str,
        db: AsyncSession,
    ) -> DMModel:
        # DB UNIQUE constraint is the final guard
        result = await db.execute(select(DMModel).where(DMModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        dm = DMModel(
            email=email,
            display_name=display_name,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(dm)
        await db.flush()
        await db.refresh(dm)
        logger.info("DM registered: %s", dm.id)
        return dm

    async def login(
        self,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[DMModel, str, str]:
        """Authenticate and return (dm, access_token, refresh_token).

        Unknown email and wrong password raise the same error.
        """
        result = await db.execute(select(DMModel).where(DMModel.email == email))
        dm = result.scalar_one_or_none()

        if dm is None or not verify_password(password, dm.password_hash):
            raise InvalidCredentialsError()

        if not dm.is_active:
            raise AccountDisabledError()

        return (
            dm,
            create_access_token(str(dm.id)),
            create_refresh_token(str(dm.id)),
        )

    async def refresh(self, refresh_token: str) -> str:
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))
