"""Authentication router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from cms_api.config import get_settings
from cms_api.dependencies import get_auth_service
from cms_api.models.dto.auth import LoginRequest, RegisterRequest, TokenResponse, UserInfo
from cms_api.models.dto.common import ApiResponse
from cms_api.security.auth import CurrentUser
from cms_api.security.rate_limit import AUTH_LOGIN_LIMIT, limiter
from cms_api.services.auth_service import AuthService

router = APIRouter()

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def _set_token_cookie(response: Response, token: TokenResponse) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.jwt_cookie_name,
        value=token.access_token,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        max_age=token.expires_in,
    )


@router.post(
    "/register",
    response_model=ApiResponse[TokenResponse],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(AUTH_LOGIN_LIMIT)
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    auth_service: AuthServiceDep,
) -> ApiResponse[TokenResponse]:
    """Create an account with the default role and log it in."""
    token = await auth_service.register(body)
    _set_token_cookie(response, token)
    return ApiResponse(message="Registration successful", data=token)


@router.post("/login", response_model=ApiResponse[TokenResponse])
@limiter.limit(AUTH_LOGIN_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth_service: AuthServiceDep,
) -> ApiResponse[TokenResponse]:
    """Log in with email and password.

    The token is returned in the body and also set as an HTTP-only cookie.
    """
    token = await auth_service.authenticate_local(body.email, body.password)
    _set_token_cookie(response, token)
    return ApiResponse(message="Login successful", data=token)


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(response: Response, current_user: CurrentUser) -> ApiResponse[dict]:
    """Log out by clearing the token cookie.

    Bearer tokens stay valid until they expire; clients drop them on their side.
    """
    settings = get_settings()
    response.delete_cookie(
        key=settings.jwt_cookie_name,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
    )
    return ApiResponse(message="Logged out", data={})


@router.get("/me", response_model=ApiResponse[UserInfo])
async def get_me(current_user: CurrentUser, auth_service: AuthServiceDep) -> ApiResponse[UserInfo]:
    """Get the current user with role and effective permissions."""
    return ApiResponse(data=await auth_service.get_user_info(current_user.id))
