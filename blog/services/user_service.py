"""
User service — CRUD for user accounts.

Password hashes never leave this module: every function returns the
public dict built by ``user_to_dict``.  Emails arrive lowercased from the
request schemas, which makes the unique index case-insensitive in
practice.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import ConflictError
from blog.models import User
from blog.schemas import UserCreate, UserUpdate
from blog.security import hash_password

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def user_to_dict(user: User) -> dict:
    """Public view of a user."""
    return {
        "id": user.id,
        "nombre": user.name,
        "email": user.email,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }


async def _email_taken(db: AsyncSession, email: str, exclude_id: int | None = None) -> bool:
    q = select(User.id).where(User.email == email)
    if exclude_id is not None:
        q = q.where(User.id != exclude_id)
    result = await db.execute(q)
    return result.first() is not None


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def get_users(db: AsyncSession) -> list[dict]:
    """Return all users ordered by creation date (newest first)."""
    q = select(User).order_by(User.created_at.desc(), User.id.desc())
    result = await db.execute(q)
    return [user_to_dict(u) for u in result.scalars().all()]


async def get_user(db: AsyncSession, user_id: int) -> dict | None:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return user_to_dict(user) if user else None


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    """
    Create a user and return its public dict.

    Raises ConflictError when the email is already registered.  The unique
    index still guards against two concurrent inserts; routers translate
    the resulting IntegrityError the same way.
    """
    if await _email_taken(db, data.email):
        raise ConflictError("A user with this email already exists")

    user = User(
        name=data.name,
        email=data.email,
        password_hash=await hash_password(data.password),
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("Created user id=%s", user.id)
    return user_to_dict(user)


async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> dict | None:
    """
    Replace name and email of *user_id*, and the password when one is given.

    Returns None when the user does not exist; raises ConflictError when
    the email belongs to another user.
    """
    result = await db.execute(select(User).where(User.id == user_id).with_for_update())
    user = result.scalar_one_or_none()
    if user is None:
        return None

    if await _email_taken(db, data.email, exclude_id=user_id):
        raise ConflictError("This email is already registered by another user")

    user.name = data.name
    user.email = data.email
    if data.password is not None:
        user.password_hash = await hash_password(data.password)

    await db.flush()
    await db.refresh(user)
    return user_to_dict(user)


async def delete_user(db: AsyncSession, user_id: int) -> bool:
    result = await db.execute(delete(User).where(User.id == user_id))
    if result.rowcount == 0:
        return False
    logger.info("Deleted user id=%s", user_id)
    return True
