from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog.database import get_db
from blog.dependencies import get_current_user
from blog.exceptions import ConflictError
from blog.schemas import LoginRequest, UserCreate, UserUpdate
from blog.services import auth_service, user_service

router = APIRouter(prefix="/api", tags=["users"])

NOT_FOUND = "User not found"
DUPLICATE_EMAIL = "A user with this email already exists"


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

@router.post("/registro", status_code=201)
async def register(data: UserCreate, db: AsyncSession = Depends(get_db)):
    try:
        user = await auth_service.register(db, data)
    except IntegrityError:
        raise ConflictError(DUPLICATE_EMAIL)
    return {"success": True, "message": "User registered", "user": user}


@router.post("/login")
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    user, token = await auth_service.login(db, data)
    return {"success": True, "message": "Login successful", "user": user, "token": token}


@router.get("/me")
async def me(user: dict = Depends(get_current_user)):
    return {"success": True, "user": user}


# ---------------------------------------------------------------------------
# User administration
# ---------------------------------------------------------------------------

@router.get("/usuarios")
async def list_users(db: AsyncSession = Depends(get_db)):
    return {"success": True, "usuarios": await user_service.get_users(db)}


@router.get("/usuarios/{user_id}")
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True, "usuario": user}


@router.post("/usuarios", status_code=201)
async def create_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.create_user(db, data)
    except IntegrityError:
        raise ConflictError(DUPLICATE_EMAIL)
    return {"success": True, "message": "User created", "usuario": user}


@router.put("/usuarios/{user_id}")
async def update_user(user_id: int, data: UserUpdate, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.update_user(db, user_id, data)
    except IntegrityError:
        raise ConflictError(DUPLICATE_EMAIL)
    if not user:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True, "message": "User updated", "usuario": user}


@router.delete("/usuarios/{user_id}")
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    deleted = await user_service.delete_user(db, user_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True, "message": "User deleted"}
