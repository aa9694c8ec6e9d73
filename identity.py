import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import auth
from database import fits_integer_column
from errors import ConflictError, InvalidCredentials, ValidationError
from models import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class IdentityStore:
    """Registered accounts and their credential hashes."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, name: str, email: str, password: str) -> User:
        if not name or not email or not password:
            raise ValidationError("All fields are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if len(password.encode("utf-8")) > auth.BCRYPT_MAX_BYTES:
            raise ValidationError(
                f"Password must be at most {auth.BCRYPT_MAX_BYTES} bytes long"
            )

        if self._find_by_email(email):
            raise ConflictError()

        user = User(name=name, email=email, password_hash=auth.hash_password(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request registered the same email in the meantime.
            self.db.rollback()
            raise ConflictError()
        self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        if not email or not password:
            raise ValidationError("Email and password are required")

        # Same error for unknown email and wrong password.
        user = self._find_by_email(email)
        if not user or not auth.verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise InvalidCredentials()
        return user

    def find_by_id(self, user_id: int) -> Optional[User]:
        if not fits_integer_column(user_id):
            return None
        return self.db.get(User, user_id)

    def _find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()
