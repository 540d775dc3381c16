"""Domain models persisted by the storefront database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Represents a user account stored in the storefront database."""

    id: int
    name: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    maker: str
    price: int
    image_url: Optional[str]
    created_at: datetime


__all__ = ["Product", "User"]
