"""User records and credential hashing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass
class User:
    username: str
    password_hash: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    id: Optional[int] = None

    def public_view(self) -> dict:
        """Profile fields safe to return to clients."""

        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
            "email": self.email,
            "avatar_url": self.avatar_url,
        }


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


__all__ = ["User", "hash_password", "verify_password"]
