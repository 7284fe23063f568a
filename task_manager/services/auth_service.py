"""Credential issuance and verification.

Passwords are hashed with bcrypt; access tokens are HS256 JWTs whose ``sub``
claim is the user id.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, SECRET_KEY

ALGORITHM = "HS256"


class InvalidTokenError(Exception):
    """Token failed signature, expiry or structural checks."""


class AuthService:
    def __init__(
        self,
        secret_key: str = SECRET_KEY,
        expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
        algorithm: str = ALGORITHM,
    ) -> None:
        self.secret_key = secret_key
        self.expire_minutes = expire_minutes
        self.algorithm = algorithm

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt directly."""
        password_bytes = password.encode("utf-8")[:72]  # bcrypt only uses the first 72 bytes
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        password_bytes = plain_password.encode("utf-8")[:72]
        hashed_bytes = hashed_password.encode("utf-8") if isinstance(hashed_password, str) else hashed_password
        return bcrypt.checkpw(password_bytes, hashed_bytes)

    def issue_token(self, subject_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT access token for an already verified subject."""
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=self.expire_minutes))
        return jwt.encode({"sub": subject_id, "exp": expire}, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc
        if not isinstance(payload, dict):
            raise InvalidTokenError("token payload is not an object")
        return payload


def get_auth_service() -> AuthService:
    return AuthService()
