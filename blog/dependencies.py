from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from blog.database import get_db
from blog.security import decode_access_token
from blog.services import user_service

# Only used to pull the bearer token out of the Authorization header;
# the login endpoint itself takes a JSON body.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Resolve the bearer token to the public dict of its user.

    Raises 401 for a missing, invalid or expired token, and for a token
    whose user has since been deleted.
    """
    credentials_exception = HTTPException(
        status_code=401,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = decode_access_token(token)
    if user_id is None:
        raise credentials_exception

    user = await user_service.get_user(db, user_id)
    if user is None:
        raise credentials_exception
    return user
