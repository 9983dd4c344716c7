from typing import Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.exceptions import InvalidCredentials
from app.core.rate_limit import auth_rate_limit, limiter
from app.schemas.auth import LoginRequest, SignupRequest, UserResponse
from app.schemas.responses import SuccessResponse
from app.services.user_service import UserService

router = APIRouter()


@router.post("/signup", response_model=SuccessResponse[UserResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_rate_limit)
async def signup(
    request: Request,
    signup_in: SignupRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Create a back-office account. Rejects an email that is already registered.
    """
    user = await UserService.create_user(
        db,
        name=signup_in.name,
        email=signup_in.email,
        password=signup_in.password,
    )
    return SuccessResponse(
        data=UserResponse.model_validate(user),
        message="Signup successful"
    )


@router.post("/login", response_model=SuccessResponse[UserResponse])
@limiter.limit(auth_rate_limit)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Verify email and password. No session or token is issued.
    The same error is returned for an unknown email and a wrong password.
    """
    user = await UserService.authenticate_user(db, email=login_data.email, password=login_data.password)
    if not user:
        raise InvalidCredentials()

    return SuccessResponse(
        data=UserResponse.model_validate(user),
        message="Login successful"
    )
