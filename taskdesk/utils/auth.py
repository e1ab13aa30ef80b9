from datetime import datetime, timedelta, UTC
from typing import Optional
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from taskdesk.config import SECRET_KEY, ALGORITHM
from taskdesk.database import MAX_ID
from taskdesk.utils.errors import CredentialExpired, InvalidCredential

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_MAX_BYTES = 72


def check_password_length(password: str) -> str:
    """Raise ValueError if the UTF-8 encoding exceeds bcrypt's 72-byte limit."""
    if isinstance(password, str) and len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password too long: must be at most {PASSWORD_MAX_BYTES} bytes when UTF-8 encoded")
    return password


def hash_password(password: str):
    return pwd_context.hash(check_password_length(password))


def verify_password(plain, hashed):
    """Verify a plaintext password against a hash.

    If verification raises a ValueError (for example plain >72 bytes), return False
    to allow the caller to respond with an authentication failure instead of an error.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def create_token(user_id: int, expires_minutes: Optional[float] = None) -> str:
    # read expiry at call-time so runtime overrides of
    # taskdesk.config.ACCESS_TOKEN_EXPIRE_MINUTES take effect immediately
    import taskdesk.config as _cfg
    minutes = _cfg.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    payload = {"sub": str(user_id), "exp": int(expire.timestamp())}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> int:
    """Verify signature and expiry and return the embedded user id.

    Raises CredentialExpired or InvalidCredential.
    """
    try:
        # jwt.decode validates exp automatically
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], options={"require_exp": True})
    except ExpiredSignatureError:
        raise CredentialExpired()
    except JWTError:
        raise InvalidCredential()

    sub = payload.get("sub")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise InvalidCredential()
    if not 1 <= user_id <= MAX_ID:
        raise InvalidCredential()
    return user_id
