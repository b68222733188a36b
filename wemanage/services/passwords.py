"""Password hashing for local credentials."""

from passlib.context import CryptContext

BCRYPT_ROUNDS = 12

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def get_password_hash(password: str) -> str:
    """Hash a password. The salt is generated per call and embedded in the hash."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a password against its hash.

    Returns False instead of raising when the stored hash is missing or not a
    recognisable bcrypt hash.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def dummy_verify() -> None:
    """Burn one hash computation so a miss costs as much as a wrong password."""
    pwd_context.dummy_verify()
