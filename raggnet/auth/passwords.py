"""
Password hashing with bcrypt.
bcrypt only reads the first 72 bytes of its input, so longer passwords are truncated explicitly.
"""
import bcrypt

BCRYPT_MAX_BYTES = 72


def _truncate_to_bytes(value: str, max_bytes: int = BCRYPT_MAX_BYTES) -> bytes:
    return value.encode("utf-8")[:max_bytes]


def hash_password(password: str) -> str:
    if password is None:
        raise ValueError("password is required")
    hashed = bcrypt.hashpw(_truncate_to_bytes(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(_truncate_to_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        return False
