"""Password hashing for bootstrap accounts and enrolled students."""
from __future__ import annotations

from passlib.context import CryptContext

from .config import PASSWORD_HASH_ROUNDS


def build_context(rounds: int = PASSWORD_HASH_ROUNDS) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


pwd_context = build_context()


def hash_password(password: str, context: CryptContext | None = None) -> str:
    return (context or pwd_context).hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)
