"""FastAPI dependency: get_current_dm.

Usage in any DM-facing router:
    from src.mk_gateway.auth.dependencies import get_current_dm

    @router.get("/markets")
    async def list_markets(dm: DMModel = Depends(get_current_dm)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.errors import AccountDisabledError, InvalidCredentialsError
from src.mk_gateway.auth.jwt_handler import decode_token
from src.mk_gateway.dm.db_models import DMModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_dm(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> DMModel:
    """Validate the Bearer token and load the DM it was issued to.

    Raises HTTP 401 if the token is missing, invalid, or expired, and
    AccountDisabledError (403) if the DM account was disabled.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    dm_id: str | None = payload.get("sub")
    if not dm_id:
        raise _CREDENTIALS_EXCEPTION

    result = await db.execute(select(DMModel).where(DMModel.id == dm_id))
    dm = result.scalar_one_or_none()
    if dm is None:
        raise _CREDENTIALS_EXCEPTION

    if not dm.is_active:
        raise AccountDisabledError()

    return dm
