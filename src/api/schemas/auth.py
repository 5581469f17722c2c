"""Authentication request and response models."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    confirm_password: str = Field(..., min_length=1, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=100)
    confirm_new_password: str = Field(..., min_length=1, max_length=100)


class UserInfo(BaseModel):
    """Public view of the signed-in user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    roles: list[str] = Field(
        ...,
        validation_alias=AliasChoices("role_names", "roles"),
        examples=[["User"]],
    )
    last_login_at: datetime | None = None


class AuthResponse(BaseModel):
    """Token pair issued on register, login and refresh."""

    model_config = ConfigDict(from_attributes=True)

    access_token: str
    access_token_expiry: datetime
    refresh_token: str
    refresh_token_expiry: datetime
    user: UserInfo


class LogoutResponse(BaseModel):
    revoked_tokens: int
