"""Auth Service - password hashing, login and JWT bearer-token verification.

Invariants:
    - Passwords stored only as bcrypt hashes
    - Tokens are HS256-signed (JWT_ALGORITHM) with sub=user id, role, iat, exp
    - Every token failure surfaces as UnauthorizedError, never a PyJWT exception
    - Inactive users can neither log in nor use an existing token
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
import jwt

from app.core.errors import InactiveUserError, InvalidCredentialsError, UnauthorizedError
from app.core.repository_protocols import UserLike, UserRepository

# bcrypt only looks at the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    expires_in: int
    token_type: str = "bearer"


@dataclass
class AuthService:
    repository: UserRepository
    secret: str
    algorithm: str = "HS256"
    expires_minutes: int = 60

    def issue_token(self, user: UserLike) -> TokenPair:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "role": user.role,
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        return TokenPair(access_token=token, expires_in=self.expires_minutes * 60)

    async def login(self, email: str, password: str) -> TokenPair:
        user = await self.repository.get_by_email(email.strip().lower())
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        if not user.is_active:
            raise InactiveUserError()
        user.last_login_at = datetime.now(timezone.utc)
        await self.repository.save(user)
        return self.issue_token(user)

    async def authenticate(self, token: str | None) -> UserLike:
        """Resolve a bearer token to an active user."""
        if not token:
            raise UnauthorizedError()
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid token")
        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise UnauthorizedError("Invalid token")
        user = await self.repository.get(user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("Invalid token")
        return user
