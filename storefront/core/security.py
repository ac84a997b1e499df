"""Password hashing, signed access/refresh tokens and password-reset tickets."""

import hashlib
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt
from pydantic import ValidationError

from storefront.schemas.auth import AccessToken, ResetTicket, TokenPayload

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for email and password validation.
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 2
PASSWORD_MAX_LEN = 128

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class PasswordHasher:
    """Bcrypt hasher with a configurable cost, injected into the auth service."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        return hash_password(plain_password, rounds=self.rounds)

    def verify(self, plain_password: str, hashed: str) -> bool:
        return verify_password(plain_password, hashed)


class TokenError(Exception):
    """Base class for token verification failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TokenExpired(TokenError):
    """Raised when a token's signature is valid but its expiry has elapsed."""


class TokenInvalid(TokenError):
    """Raised for any other verification failure (bad signature, malformed, wrong type)."""


class TokenIssuer:
    """
    Issue and verify signed JWTs carrying {id, email, role}.

    Access and refresh tokens are signed with different secrets and carry a
    "type" claim, so a refresh token is never accepted where an access token
    is expected (and vice versa).
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Clock = utc_now,
    ) -> None:
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock

    def _encode(self, claims: TokenPayload, secret: str, ttl: timedelta, token_type: str) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "id": claims.id,
            "email": claims.email,
            "role": claims.role,
            "type": token_type,
            "exp": now + ttl,
            "iat": now,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access_token(self, claims: TokenPayload) -> AccessToken:
        token = self._encode(claims, self.access_secret, self.access_ttl, ACCESS_TOKEN_TYPE)
        return AccessToken(
            token=token,
            expires_in_seconds=int(self.access_ttl.total_seconds()),
        )

    def issue_refresh_token(self, claims: TokenPayload) -> str:
        return self._encode(claims, self.refresh_secret, self.refresh_ttl, REFRESH_TOKEN_TYPE)

    def verify(self, token: str, secret: str, token_type: str | None = None) -> TokenPayload:
        """
        Decode and validate a token; return its claims.
        Raises TokenExpired when exp has elapsed, TokenInvalid for anything else.
        """
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired("Token is expired") from e
        except jwt.PyJWTError as e:
            raise TokenInvalid("Token is invalid") from e
        if token_type is not None and payload.get("type") != token_type:
            raise TokenInvalid("Token is invalid")
        try:
            return TokenPayload(
                id=payload.get("id"),
                email=payload.get("email"),
                role=payload.get("role"),
            )
        except ValidationError as e:
            raise TokenInvalid("Invalid token payload") from e

    def verify_access_token(self, token: str) -> TokenPayload:
        return self.verify(token, self.access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> TokenPayload:
        return self.verify(token, self.refresh_secret, REFRESH_TOKEN_TYPE)


class ResetTokenGenerator:
    """Random password-reset tokens; only the SHA-256 digest is ever stored."""

    def __init__(
        self,
        window: timedelta = timedelta(minutes=10),
        clock: Clock = utc_now,
        nbytes: int = 32,
    ) -> None:
        self.window = window
        self.nbytes = nbytes
        self._clock = clock

    @staticmethod
    def digest(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def generate(self) -> ResetTicket:
        token = secrets.token_hex(self.nbytes)
        return ResetTicket(
            token=token,
            token_hash=self.digest(token),
            expires_at=self._clock() + self.window,
        )
