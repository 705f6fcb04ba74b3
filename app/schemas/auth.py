"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, EmailStr, Field

from app.schemas.users import Role, UserPublic


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after register or login, with the user it belongs to."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserPublic


class CurrentUser(BaseModel):
    """Authenticated caller resolved from the bearer token."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    address: str | None = None
    role: Role


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
