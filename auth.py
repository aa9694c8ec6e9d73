import logging
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config import BCRYPT_ROUNDS, SECRET_KEY, TOKEN_MAX_AGE_SECONDS
from errors import InvalidCredential, Unauthenticated
from schemas import CurrentUser

logger = logging.getLogger(__name__)

# bcrypt ignores (or rejects) anything past 72 bytes of input.
BCRYPT_MAX_BYTES = 72

serializer = URLSafeTimedSerializer(SECRET_KEY, salt="access-token")
bearer_scheme = HTTPBearer(auto_error=False, description="Token returned by login or register")


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))


def issue_token(user) -> str:
    """Sign a token binding the user's id, email and name."""
    return serializer.dumps({"id": user.id, "email": user.email, "name": user.name})


def verify_token(token: str, max_age: Optional[int] = None) -> CurrentUser:
    if max_age is None:
        max_age = TOKEN_MAX_AGE_SECONDS
    try:
        claims = serializer.loads(token, max_age=max_age)
    except SignatureExpired:
        logger.info("Rejected expired access token")
        raise InvalidCredential()
    except BadSignature:
        logger.warning("Rejected access token with bad signature")
        raise InvalidCredential()

    try:
        return CurrentUser.model_validate(claims)
    except ValueError:
        logger.warning("Rejected access token with malformed claims")
        raise InvalidCredential()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Dependency resolving the caller from the ``Authorization: Bearer`` header."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return verify_token(credentials.credentials)
