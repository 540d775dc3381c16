"""SQLite-backed persistence for users, roles and products."""
from __future__ import annotations

import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from passlib.context import CryptContext

from .models import Product, User


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "storefront.sqlite3").resolve(strict=False)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


# Largest value an SQLite INTEGER column can hold.
MAX_INTEGER = 2**63 - 1


def _storable_id(value: int) -> bool:
    return 0 <= value <= MAX_INTEGER


def normalize_email(email: str) -> str:
    return email.strip().lower()


_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return a one-way hash suitable for storing in ``users.password_hash``."""

    if not password:
        raise ValueError("Password must not be empty")
    return _pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return _pwd_context.verify(password, hashed)
    except ValueError:
        return False


class UserRepository:
    """User and role queries bound to the connection of one unit of work."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get(self, user_id: int) -> Optional[User]:
        if not _storable_id(user_id):
            return None
        row = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return _row_to_user(row)

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._conn.execute(
            "SELECT * FROM users WHERE email = ?",
            (normalize_email(email),),
        ).fetchone()
        if row is None:
            return None
        return _row_to_user(row)

    def exists_by_email(self, email: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM users WHERE email = ?",
            (normalize_email(email),),
        ).fetchone()
        return row is not None

    def add(self, *, name: str, email: str) -> User:
        """Insert a user without credentials; callers set the password hash next."""

        created_at = _current_timestamp()
        cursor = self._conn.execute(
            "INSERT INTO users (name, email, password_hash, created_at) VALUES (?, ?, '', ?)",
            (name, normalize_email(email), _serialize_datetime(created_at)),
        )
        user = self.get(int(cursor.lastrowid))
        if user is None:
            raise RuntimeError("Failed to load user after creation")
        return user

    def update_profile(self, user_id: int, *, name: str) -> None:
        if not _storable_id(user_id):
            return
        self._conn.execute("UPDATE users SET name = ? WHERE id = ?", (name, user_id))

    def set_password_hash(self, user_id: int, password_hash: str) -> None:
        if not _storable_id(user_id):
            return
        self._conn.execute(
            "UPDATE users SET password_hash = ? WHERE id = ?",
            (password_hash, user_id),
        )

    def delete(self, user_id: int) -> bool:
        if not _storable_id(user_id):
            return False
        cursor = self._conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        return cursor.rowcount > 0

    def add_role(self, user_id: int, role: str) -> None:
        self._conn.execute(
            "INSERT OR IGNORE INTO roles (user_id, name) VALUES (?, ?)",
            (user_id, role),
        )

    def roles_for(self, user_id: int) -> List[str]:
        if not _storable_id(user_id):
            return []
        rows = self._conn.execute(
            "SELECT name FROM roles WHERE user_id = ? ORDER BY name",
            (user_id,),
        ).fetchall()
        return [str(row["name"]) for row in rows]


class ProductRepository:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def list_all(self) -> List[Product]:
        rows = self._conn.execute("SELECT * FROM products ORDER BY id").fetchall()
        return [_row_to_product(row) for row in rows]

    def get(self, product_id: int) -> Optional[Product]:
        if not _storable_id(product_id):
            return None
        row = self._conn.execute("SELECT * FROM products WHERE id = ?", (product_id,)).fetchone()
        if row is None:
            return None
        return _row_to_product(row)

    def add(self, *, name: str, maker: str, price: int, image_url: Optional[str]) -> Product:
        created_at = _current_timestamp()
        cursor = self._conn.execute(
            """
            INSERT INTO products (name, maker, price, image_url, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (name, maker, price, image_url, _serialize_datetime(created_at)),
        )
        product = self.get(int(cursor.lastrowid))
        if product is None:
            raise RuntimeError("Failed to load product after creation")
        return product

    def update(
        self,
        product_id: int,
        *,
        name: str,
        maker: str,
        price: int,
        image_url: Optional[str],
    ) -> Optional[Product]:
        if not _storable_id(product_id):
            return None
        cursor = self._conn.execute(
            """
            UPDATE products
               SET name = ?, maker = ?, price = ?, image_url = ?
             WHERE id = ?
            """,
            (name, maker, price, image_url, product_id),
        )
        if cursor.rowcount == 0:
            return None
        return self.get(product_id)

    def delete(self, product_id: int) -> bool:
        if not _storable_id(product_id):
            return False
        cursor = self._conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
        return cursor.rowcount > 0


class UnitOfWork:
    """Repositories sharing a single connection and transaction."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.users = UserRepository(conn)
        self.products = ProductRepository(conn)


class Database:
    """Simple wrapper around SQLite for persisting users and products."""

    def __init__(self, path: Path) -> None:
        path = Path(path)
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with closing(self._connect()) as conn, conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS roles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    name TEXT NOT NULL,
                    UNIQUE (user_id, name)
                );

                CREATE TABLE IF NOT EXISTS products (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    maker TEXT NOT NULL,
                    price INTEGER NOT NULL,
                    image_url TEXT,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_roles_user_id ON roles(user_id);
                """
            )

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """Yield repositories whose writes commit together or not at all."""

        conn = self._connect()
        try:
            yield UnitOfWork(conn)
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()
        finally:
            conn.close()


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=int(row["id"]),
        name=str(row["name"]),
        email=str(row["email"]),
        password_hash=str(row["password_hash"]),
        created_at=_parse_datetime(str(row["created_at"])),
    )


def _row_to_product(row: sqlite3.Row) -> Product:
    return Product(
        id=int(row["id"]),
        name=str(row["name"]),
        maker=str(row["maker"]),
        price=int(row["price"]),
        image_url=row["image_url"],
        created_at=_parse_datetime(str(row["created_at"])),
    )


__all__ = [
    "Database",
    "MAX_INTEGER",
    "ProductRepository",
    "UnitOfWork",
    "UserRepository",
    "hash_password",
    "normalize_email",
    "resolve_database_path",
    "verify_password",
]
