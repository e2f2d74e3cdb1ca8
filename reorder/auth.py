"""Password hashing and JWT access/refresh token handling."""
import time
import uuid
from functools import lru_cache
from typing import NamedTuple

import jwt
from passlib.context import CryptContext

from .config import get_settings
from .errors import InternalFailureError, TokenExpiredError, TokenInvalidError, TokenMalformedError

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError) as e:
        # unidentifiable or corrupt stored hash, not a mismatch
        raise InternalFailureError("password verification failed") from e


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class TokenService:
    """Issues and verifies access/refresh tokens signed with independent secrets."""

    def __init__(self, access_secret: str, refresh_secret: str, access_ttl: int, refresh_ttl: int):
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    def _encode(self, user_id: str, secret: str, ttl: int) -> str:
        now = int(time.time())
        payload = {"userId": str(user_id), "iat": now, "exp": now + ttl, "jti": uuid.uuid4().hex}
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def _decode(self, token: str, secret: str) -> str:
        if not isinstance(token, str) or not token:
            raise TokenMalformedError()
        try:
            payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": ["exp"]})
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidSignatureError:
            raise TokenInvalidError()
        except jwt.DecodeError:
            raise TokenMalformedError()
        except jwt.InvalidTokenError:
            raise TokenInvalidError()

        user_id = payload.get("userId")
        if not isinstance(user_id, str) or not user_id:
            raise TokenInvalidError()
        return user_id

    def issue(self, user_id: str) -> TokenPair:
        return TokenPair(
            access_token=self._encode(user_id, self.access_secret, self.access_ttl),
            refresh_token=self._encode(user_id, self.refresh_secret, self.refresh_ttl),
        )

    def verify_access(self, token: str) -> str:
        return self._decode(token, self.access_secret)

    def verify_refresh(self, token: str) -> str:
        return self._decode(token, self.refresh_secret)


@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(
        access_secret=settings.jwt_secret,
        refresh_secret=settings.jwt_refresh_secret,
        access_ttl=settings.access_token_ttl,
        refresh_ttl=settings.refresh_token_ttl,
    )
