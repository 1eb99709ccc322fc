from fastapi.concurrency import run_in_threadpool
from passlib.context import CryptContext
from cardvault.core.config import settings

# CryptContext handles password hashing using bcrypt
# Every hash() call draws a fresh random salt at the configured cost factor
# and embeds it in the output ($2b$<rounds>$<salt><digest>)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt with a new salt"""
    return pwd_context.hash(password)


async def get_password_hash_async(password: str) -> str:
    """
    Hash a password without blocking the event loop.

    bcrypt is slow on purpose, so the work runs in the threadpool and the
    caller suspends until the hash is ready (or the hashing fails).
    """
    return await run_in_threadpool(get_password_hash, password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)
