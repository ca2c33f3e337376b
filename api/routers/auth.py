"""Authentication router for registration, login, token refresh and logout."""

from fastapi import APIRouter, Depends, Request, Response, status
from typing import Optional

from api.dependencies import get_context, get_current_user
from api.errors import to_http_exception
from models.envelope import ApiErrorResponse, ApiResponse
from models.user import AccessTokenData, AuthData, ProfileData, UserCreate, UserInDB, UserLogin
from services.auth_service import AuthService
from services.context import AppContext
from services.errors import TaskFlowError


router = APIRouter(prefix="/auth", tags=["Authentication"])

_ERRORS = {
    400: {"model": ApiErrorResponse},
    401: {"model": ApiErrorResponse},
}


def set_refresh_cookie(response: Response, context: AppContext, refresh_token: str) -> None:
    """Store the refresh token in an httpOnly, strict-site cookie scoped to /auth."""
    config = context.settings
    response.set_cookie(
        key=config.REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        secure=config.is_production,
        samesite="strict",
        max_age=config.refresh_cookie_max_age,
        path=config.refresh_cookie_path,
    )


def clear_refresh_cookie(response: Response, context: AppContext) -> None:
    """Expire the refresh cookie with the same attributes it was set with."""
    config = context.settings
    response.delete_cookie(
        key=config.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=config.is_production,
        samesite="strict",
        path=config.refresh_cookie_path,
    )


def read_refresh_cookie(request: Request, context: AppContext) -> Optional[str]:
    """The refresh token presented by the client, if any."""
    return request.cookies.get(context.settings.REFRESH_COOKIE_NAME) or None


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
async def register(
    user_data: UserCreate,
    response: Response,
    context: AppContext = Depends(get_context),
):
    """Register a new user account and start its session."""
    try:
        session = await context.auth.register(user_data.name, user_data.email, user_data.password)
    except TaskFlowError as e:
        raise to_http_exception(e) from e

    set_refresh_cookie(response, context, session.refresh_token)
    return ApiResponse(
        message="User registered successfully",
        data=AuthData(user=session.user, access_token=session.access_token),
    )


@router.post("/login", response_model=ApiResponse[AuthData], responses=_ERRORS)
async def login(
    user_data: UserLogin,
    response: Response,
    context: AppContext = Depends(get_context),
):
    """Authenticate user and return an access token plus refresh cookie."""
    try:
        session = await context.auth.login(user_data.email, user_data.password)
    except TaskFlowError as e:
        raise to_http_exception(e) from e

    set_refresh_cookie(response, context, session.refresh_token)
    return ApiResponse(
        message="Login successful",
        data=AuthData(user=session.user, access_token=session.access_token),
    )


@router.post("/refresh", response_model=ApiResponse[AccessTokenData], responses=_ERRORS)
async def refresh(
    request: Request,
    response: Response,
    context: AppContext = Depends(get_context),
):
    """Rotate the refresh token from the cookie and issue a new access token."""
    try:
        tokens = await context.auth.refresh(read_refresh_cookie(request, context))
    except TaskFlowError as e:
        raise to_http_exception(e) from e

    set_refresh_cookie(response, context, tokens.refresh_token)
    return ApiResponse(
        message="Token refreshed successfully",
        data=AccessTokenData(access_token=tokens.access_token),
    )


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    request: Request,
    response: Response,
    context: AppContext = Depends(get_context),
):
    """Invalidate the stored refresh token if possible and always clear the cookie."""
    await context.auth.logout(read_refresh_cookie(request, context))
    clear_refresh_cookie(response, context)
    return ApiResponse(message="Logout successful")


@router.get("/profile", response_model=ApiResponse[ProfileData], responses={401: _ERRORS[401]})
async def get_profile(current_user: UserInDB = Depends(get_current_user)):
    """Get current authenticated user information."""
    return ApiResponse(data=ProfileData(user=AuthService.get_profile(current_user)))
