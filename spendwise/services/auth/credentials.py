"""
Credential Service

Handles signup, login and per-request authentication.

DESIGN DECISION: Session tokens are stateless JWTs.
A token is valid when its signature checks out and it hasn't expired.
The most recent token is stored on the user (active_token) for
reference, but authentication never consults it.

Passwords are only ever stored as bcrypt hashes.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import bcrypt
import structlog
from jose import JWTError, jwt

from spendwise.audit import AuditLogger
from spendwise.config import AuthSettings
from spendwise.models.user import User
from spendwise.services.storage import DuplicateError, UserStorageInterface


logger = structlog.get_logger(__name__)

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


class AuthError(Exception):
    """Base exception for credential operations."""
    pass


class EmailTakenError(AuthError):
    """Signup with an email that is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already in use.")


class WeakPasswordError(AuthError):
    """Password shorter than the configured minimum."""

    def __init__(self, min_length: int):
        self.min_length = min_length
        super().__init__(f"Password must be at least {min_length} characters long.")


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password. Deliberately doesn't say which."""

    def __init__(self):
        super().__init__("Invalid email or password.")


class UnauthenticatedError(AuthError):
    """Missing, malformed, expired or foreign token, or the user is gone."""

    def __init__(self, message: str = "Authentication required."):
        super().__init__(message)


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an Authorization header.

    Accepts both "Bearer <token>" and the bare token.
    """
    if not authorization:
        return None
    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer":
        value = rest.strip()
    return value or None


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class CredentialService:
    """
    Registers users, verifies passwords and issues/checks session tokens.
    """

    def __init__(
        self,
        storage: UserStorageInterface,
        settings: AuthSettings,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._settings = settings
        self._audit_logger = audit_logger

    # =========================================================================
    # PASSWORDS
    # =========================================================================

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._settings.bcrypt_rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            # Stored hash is not a bcrypt hash
            logger.warning("invalid_password_hash")
            return False

    # =========================================================================
    # TOKENS
    # =========================================================================

    def issue_token(self, user_id: UUID) -> str:
        """Sign a token carrying the user ID, valid for expire_hours."""
        expires = datetime.now(timezone.utc) + timedelta(hours=self._settings.expire_hours)
        claims = {"id": str(user_id), "exp": expires}
        return jwt.encode(claims, self._settings.secret, algorithm=self._settings.algorithm)

    def decode_token(self, token: str) -> UUID:
        """
        Check signature and expiry and return the user ID.

        Raises:
            UnauthenticatedError: On any token problem
        """
        try:
            claims = jwt.decode(
                token,
                self._settings.secret,
                algorithms=[self._settings.algorithm],
            )
        except JWTError as e:
            logger.info("token_rejected", reason=str(e))
            raise UnauthenticatedError("Invalid or expired token.") from e

        try:
            return UUID(str(claims["id"]))
        except (KeyError, ValueError) as e:
            raise UnauthenticatedError("Invalid or expired token.") from e

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> User:
        """
        Create a new user with a zero budget.

        Raises:
            WeakPasswordError: If the password is too short
            EmailTakenError: If the email is already registered (any case)
        """
        if len(password) < self._settings.password_min_length:
            raise WeakPasswordError(self._settings.password_min_length)

        normalized = email.strip().lower()
        if await self._storage.get_user_by_email(normalized) is not None:
            raise EmailTakenError(normalized)

        user = User(
            name=name,
            email=normalized,
            password_hash=self.hash_password(password),
        )

        try:
            user = await self._storage.create_user(user)
        except DuplicateError as e:
            # Lost a race with a concurrent signup
            raise EmailTakenError(normalized) from e

        if self._audit_logger:
            await self._audit_logger.log_user_registered(user.id, user.email, correlation_id)

        return user

    async def login(
        self,
        email: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[str, User]:
        """
        Verify credentials and issue a session token.

        Returns:
            (token, user)

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
        """
        normalized = email.strip().lower()
        user = await self._storage.get_user_by_email(normalized)

        if user is None or not self.verify_password(password, user.password_hash):
            if self._audit_logger:
                await self._audit_logger.log_login_failed(normalized, correlation_id)
            raise InvalidCredentialsError()

        token = self.issue_token(user.id)
        await self._storage.set_active_token(user.id, token)

        if self._audit_logger:
            await self._audit_logger.log_login_succeeded(user.id, correlation_id)

        return token, user

    async def authenticate(self, token: Optional[str]) -> User:
        """
        Resolve a token to its (freshly loaded) user.

        Raises:
            UnauthenticatedError: Missing or invalid token, or unknown user
        """
        if not token:
            raise UnauthenticatedError()

        user_id = self.decode_token(token)
        user = await self._storage.get_user_by_id(user_id)
        if user is None:
            raise UnauthenticatedError("User for this token no longer exists.")
        return user
