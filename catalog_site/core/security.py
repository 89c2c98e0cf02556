from passlib.context import CryptContext


password_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def configure_password_hashing(rounds: int) -> None:
    """Set the bcrypt work factor used for new hashes."""
    password_context.update(bcrypt__rounds=rounds)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True when the provided password matches the stored hash.

    A malformed or foreign hash counts as a mismatch.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return password_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def dummy_verify() -> None:
    """Spend roughly the time of a real verification, for unknown usernames."""
    password_context.dummy_verify()


def hash_password(password: str) -> str:
    """Hash the provided password for storage."""
    return password_context.hash(password)
