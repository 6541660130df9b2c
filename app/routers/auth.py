from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_user, get_settings, issue_token_for
from app.core.config import Settings
from app.models.db import get_session
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    UserView,
)
from app.schemas.plan import MessageResponse
from app.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid email or password",
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    svc = UserService(session, bcrypt_rounds=settings.BCRYPT_ROUNDS)
    user = await svc.register(payload.name, payload.email, payload.password)
    return AuthResponse(token=issue_token_for(user.id, settings), user=UserView.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    user = await UserService(session).authenticate(payload.email, payload.password)
    if user is None:
        raise _invalid_credentials()
    return AuthResponse(token=issue_token_for(user.id, settings), user=UserView.model_validate(user))


@router.post("/token", response_model=TokenResponse)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """OAuth2 password flow for the interactive docs; ``username`` is the email."""
    user = await UserService(session).authenticate(form_data.username, form_data.password)
    if user is None:
        raise _invalid_credentials()
    return TokenResponse(access_token=issue_token_for(user.id, settings))


@router.post("/logout", response_model=MessageResponse)
async def logout():
    # tokens are stateless, the client just drops it
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
async def current_user(
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    db_user = await UserService(session).get_user(user.id)
    return UserResponse(user=UserView.model_validate(db_user))
