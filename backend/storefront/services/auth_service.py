# Overview: Service-layer operations for auth; credentials, login and bearer-token resolution.

"""
Authentication Service

WHY: Every protected request must resolve to an active user. Passwords are
hashed with bcrypt; bearer tokens are verified by TokenService and then
checked against the current user row, so deactivation and role changes take
effect on the very next request.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, 12 by default)
- Password strength validated on registration and password change
- Login failures are throttled per email (see login_throttle_service.py)
- No session state: the same checks run on every request
"""
from __future__ import annotations

import bcrypt

from ..errors import AuthenticationError, RateLimitedError, ValidationError
from ..permissions import Principal, Role
from ..repositories.users import UserRepository
from ..validation import validate_password_strength
from .login_throttle_service import LoginThrottle
from .token_service import ACCESS, REFRESH, InvalidTokenError, TokenExpiredError, TokenService


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. A malformed stored hash counts as a
    mismatch rather than an error.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


class AuthService:

    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenService,
        throttle: LoginThrottle,
        bcrypt_rounds: int = 12,
        logger=None,
    ):
        self.users = users
        self.tokens = tokens
        self.throttle = throttle
        self.bcrypt_rounds = bcrypt_rounds
        self.logger = logger

    def register(self, payload: dict):
        """
        Create a new account with role "user".

        A "role" key in the payload is rejected by the registration policy;
        elevated roles are granted by an admin afterwards.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")
        fields = dict(payload)
        password = fields.pop("password", None)
        password_hash = hash_password(password, rounds=self.bcrypt_rounds)
        return self.users.create(fields, password_hash=password_hash, role=Role.USER)

    def login(
        self,
        email: str,
        password: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ):
        """
        Verify credentials and issue an access/refresh token pair.

        Returns (user, tokens).
        """
        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            raise ValidationError("Email and password are required")

        is_locked, seconds_remaining = self.throttle.is_locked(email)
        if is_locked:
            raise RateLimitedError(
                "Too many failed login attempts, please try again later",
                retry_after_seconds=seconds_remaining,
            )

        user = self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            failed_count = self.throttle.record_failed_attempt(
                email,
                user_id=user.id if user else None,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            if failed_count >= self.throttle.max_failed_attempts:
                if self.logger:
                    self.logger.warning("Login locked out for %s after %d failed attempts", email, failed_count)
                raise RateLimitedError(
                    "Too many failed login attempts, please try again later",
                    retry_after_seconds=int(self.throttle.lockout_window.total_seconds()),
                )
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        self.throttle.record_successful_login(
            email, user_id=user.id, ip_address=ip_address, user_agent=user_agent
        )
        return user, self.tokens.issue_pair(user)

    def refresh(self, refresh_token: str) -> dict:
        """Exchange a valid refresh token for a new token pair."""
        if not refresh_token or not isinstance(refresh_token, str):
            raise AuthenticationError("Refresh token is required")
        try:
            claims = self.tokens.decode(refresh_token, expected_type=REFRESH)
        except TokenExpiredError:
            raise AuthenticationError("Refresh token has expired")
        except InvalidTokenError:
            raise AuthenticationError("Invalid refresh token")

        user = self.users.get_by_id(claims["sub"])
        if user is None:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        return self.tokens.issue_pair(user)

    def authenticate(self, credential: str | None) -> Principal:
        """
        Resolve an access token to the acting principal.

        Role and active flag come from the user row, not from the token
        claims, so admin changes apply immediately.
        """
        if not credential:
            raise AuthenticationError("Authentication required")
        try:
            claims = self.tokens.decode(credential, expected_type=ACCESS)
        except TokenExpiredError:
            raise AuthenticationError("Token has expired")
        except InvalidTokenError:
            raise AuthenticationError("Invalid token")

        user = self.users.get_by_id(claims["sub"])
        if user is None:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        role = Role.parse(user.role)
        if role is None:
            raise AuthenticationError("Invalid token")

        return Principal(id=user.id, email=user.email, role=role, is_active=user.is_active, name=user.name)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        if not isinstance(current_password, str) or not isinstance(new_password, str) \
                or not current_password or not new_password:
            raise ValidationError("Current password and new password are required")

        user = self.users.get_by_id(user_id)
        if user is None:
            raise AuthenticationError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        if current_password == new_password:
            raise ValidationError("New password must be different from the current password")

        self.users.update_password(user.id, hash_password(new_password, rounds=self.bcrypt_rounds))
