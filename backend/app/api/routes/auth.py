"""
Authentication routes

Login and registration are rate limited to slow down credential stuffing.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.rate_limit import limiter
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.mappers import user_to_response
from app.schemas.user import Token, UserLogin, UserRegister, UserResponse
from app.api.deps import get_current_user
from app.services.user_service import UserService

router = APIRouter()


def issue_token(user: User) -> Token:
    access_token = create_access_token({"sub": user.id, "role": user.role.value})
    return Token(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=user_to_response(user),
    )


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Create an account with the User role and return a token for it"""
    user = await UserService(db).register(
        username=user_data.username,
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
    )
    await db.commit()
    return issue_token(user)


@router.post("/login", response_model=Token)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    user = await UserService(db).authenticate(credentials.username, credentials.password)
    return issue_token(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return user_to_response(current_user)
