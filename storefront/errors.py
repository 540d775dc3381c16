"""Domain errors raised by the storefront services."""
from __future__ import annotations


class StorefrontError(Exception):
    """Base class for errors translated into HTTP responses by the API."""


class UserNotFoundError(StorefrontError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class UserEmailDuplicationError(StorefrontError):
    def __init__(self, email: str) -> None:
        super().__init__(f"User email is already existed: {email}")
        self.email = email


class ProductNotFoundError(StorefrontError):
    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class LoginFailedError(StorefrontError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Log-in failed: {email}")
        self.email = email


class MissingHeaderError(StorefrontError):
    """Raised when a request omits a header the handler requires."""

    def __init__(self, header: str) -> None:
        super().__init__(f"Missing required header: {header}")
        self.header = header


__all__ = [
    "LoginFailedError",
    "MissingHeaderError",
    "ProductNotFoundError",
    "StorefrontError",
    "UserEmailDuplicationError",
    "UserNotFoundError",
]
