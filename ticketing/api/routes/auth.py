"""
Authentication endpoints: register, login and the caller's profile.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.db.session import get_db
from ticketing.models.user import User
from ticketing.schemas.user import UserCreate, UserResponse, UserLogin, ProfileResponse, Token
from ticketing.services.auth_service import register_user, authenticate_user, get_profile
from ticketing.core.security import get_current_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new account as fan (default), organizer or artist."""
    user = await register_user(db, user_data)
    return user


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    token = await authenticate_user(db, login_data)
    return Token(access_token=token)


@router.get("/me", response_model=ProfileResponse)
async def me(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Profile including joined and applied event ids."""
    return await get_profile(db, user)
