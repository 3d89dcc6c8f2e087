import re
import uuid

from pydantic import BaseModel, EmailStr, Field, field_validator

PASSWORD_SPECIAL_CHARS = "@$!%*?&#"


def check_password_strength(password: str) -> str:
    """At least 8 characters with lowercase, uppercase, digit and a special character."""
    problems = []
    if len(password) < 8:
        problems.append("at least 8 characters")
    if not re.search(r"[a-z]", password):
        problems.append("a lowercase letter")
    if not re.search(r"[A-Z]", password):
        problems.append("an uppercase letter")
    if not re.search(r"\d", password):
        problems.append("a number")
    if not any(ch in PASSWORD_SPECIAL_CHARS for ch in password):
        problems.append(f"a special character ({PASSWORD_SPECIAL_CHARS})")
    if problems:
        raise ValueError("Password must contain " + ", ".join(problems))
    return password


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(max_length=128)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    id: uuid.UUID
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: str
    login_method: str | None = None
    avatar_url: str | None = None
    preferred_language: str
    preferred_currency: str
    loyalty_points: int
    loyalty_tier: str

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserResponse
