"""
Registration and login.

Login failures are deliberately indistinguishable: an unknown email and a
wrong password raise the same InvalidCredentialsError with the same
message, so the endpoint cannot be used to probe for registered emails.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import InvalidCredentialsError
from blog.models import User
from blog.schemas import LoginRequest, UserCreate
from blog.security import create_access_token, verify_password
from blog.services import user_service

logger = logging.getLogger(__name__)


async def register(db: AsyncSession, data: UserCreate) -> dict:
    return await user_service.create_user(db, data)


async def login(db: AsyncSession, data: LoginRequest) -> tuple[dict, str]:
    """
    Check the credentials in *data*.

    Returns the user's public dict and a signed access token.
    """
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()
    if user is None or not await verify_password(data.password, user.password_hash):
        logger.info("Failed login attempt")
        raise InvalidCredentialsError()

    return user_service.user_to_dict(user), create_access_token(user.id)
