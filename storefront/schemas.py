"""Request and response models for the storefront HTTP API."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .database import MAX_INTEGER
from .models import Product, User


def _strip_required(value: str, field: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field} must not be empty")
    return stripped


class UserCreateRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=4, max_length=1024)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        stripped = _strip_required(value, "email")
        if "@" not in stripped:
            raise ValueError("email must contain '@'")
        return stripped.lower()

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        return _strip_required(value, "name")


class UserUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=4, max_length=1024)

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        return _strip_required(value, "name")


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    roles: List[str] = Field(default_factory=list)
    created_at: datetime


class ProductData(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    maker: str = Field(..., min_length=1, max_length=255)
    price: int = Field(..., ge=0, le=MAX_INTEGER)
    image_url: Optional[str] = Field(default=None, max_length=2048)

    @field_validator("name", "maker")
    @classmethod
    def _not_blank(cls, value: str, info: ValidationInfo) -> str:
        return _strip_required(value, info.field_name)

    @field_validator("image_url")
    @classmethod
    def _normalize_image_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class ProductResponse(BaseModel):
    id: int
    name: str
    maker: str
    price: int
    image_url: Optional[str]
    created_at: datetime


class SessionRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


def user_to_response(user: User, roles: List[str]) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        roles=list(roles),
        created_at=user.created_at,
    )


def product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        maker=product.maker,
        price=product.price,
        image_url=product.image_url,
        created_at=product.created_at,
    )


__all__ = [
    "ProductData",
    "ProductResponse",
    "SessionRequest",
    "SessionResponse",
    "UserCreateRequest",
    "UserResponse",
    "UserUpdateRequest",
    "product_to_response",
    "user_to_response",
]
