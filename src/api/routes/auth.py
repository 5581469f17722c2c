"""Registration, login, token refresh, password change and logout."""

from fastapi import APIRouter, Request, status

from src.api.dependencies import AuthServiceDep, CurrentUserDep
from src.api.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    LogoutResponse,
    RefreshRequest,
    RegisterRequest,
)
from src.api.utils.client import get_client_ip

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest, request: Request, auth: AuthServiceDep
) -> AuthResponse:
    result = await auth.register(
        email=body.email,
        password=body.password,
        confirm_password=body.confirm_password,
        first_name=body.first_name,
        last_name=body.last_name,
        ip_address=get_client_ip(request),
    )
    return AuthResponse.model_validate(result)


@router.post("/login")
async def login(
    body: LoginRequest, request: Request, auth: AuthServiceDep
) -> AuthResponse:
    result = await auth.login(
        email=body.email, password=body.password, ip_address=get_client_ip(request)
    )
    return AuthResponse.model_validate(result)


@router.post("/refresh")
async def refresh(
    body: RefreshRequest, request: Request, auth: AuthServiceDep
) -> AuthResponse:
    """Exchange an access token (expired or not) and a refresh token for new ones."""
    result = await auth.refresh(
        access_token=body.access_token,
        refresh_token=body.refresh_token,
        ip_address=get_client_ip(request),
    )
    return AuthResponse.model_validate(result)


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    body: ChangePasswordRequest, user: CurrentUserDep, auth: AuthServiceDep
) -> None:
    """Change the password; every refresh token of the user is revoked."""
    await auth.change_password(
        user.id,
        current_password=body.current_password,
        new_password=body.new_password,
        confirm_new_password=body.confirm_new_password,
    )


@router.post("/logout")
async def logout(
    request: Request, user: CurrentUserDep, auth: AuthServiceDep
) -> LogoutResponse:
    revoked = await auth.logout(user.id, ip_address=get_client_ip(request))
    return LogoutResponse(revoked_tokens=revoked)
