from typing import Optional

from fastapi import Depends, Header
from loguru import logger
from sqlalchemy.orm import Session

from . import crud, models
from .auth import TokenService, get_token_service
from .db import get_db
from .errors import TokenError, UnauthenticatedError


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token part of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def require_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> models.User:
    """Resolve the acting user from the access token or reject the request."""
    token = bearer_token(authorization)
    if token is None:
        raise UnauthenticatedError()
    try:
        user_id = tokens.verify_access(token)
    except TokenError as e:
        logger.warning("rejected access token: {}", e.code)
        raise UnauthenticatedError() from e
    user = crud.get_user(db, user_id)
    if not user:
        logger.warning("access token for unknown user {}", user_id)
        raise UnauthenticatedError()
    return user
