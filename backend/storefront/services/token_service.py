# Overview: Service-layer operations for bearer tokens.

"""
Bearer Token Service

WHY: Authentication is stateless. Every request carries a signed JWT that
names the user (sub), their email and role; the server keeps no session
rows and no revocation list.

Two token classes are issued from the same secret:
- access: short-lived, accepted by every protected route
- refresh: long-lived, accepted only by the token-refresh operation

The class is carried in the "type" claim and checked on decode, so a
refresh token can never be replayed as an access token or vice versa.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt, ExpiredSignatureError, JWTError

ACCESS = "access"
REFRESH = "refresh"


class TokenExpiredError(Exception):
    """Signature is valid but the exp claim has passed."""


class InvalidTokenError(Exception):
    """Malformed token, bad signature, wrong issuer/audience or wrong token class."""


class TokenService:

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str,
        issuer: str,
        audience: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            secret=config["JWT_SECRET"],
            algorithm=config["JWT_ALGORITHM"],
            issuer=config["JWT_ISSUER"],
            audience=config["JWT_AUDIENCE"],
            access_ttl=config["JWT_ACCESS_EXPIRES"],
            refresh_ttl=config["JWT_REFRESH_EXPIRES"],
        )

    def _encode(self, *, subject: str, email: str, role: str, token_type: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": subject,
            "email": email,
            "role": role,
            "type": token_type,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def issue_access_token(self, user) -> str:
        return self._encode(subject=user.id, email=user.email, role=user.role, token_type=ACCESS, ttl=self.access_ttl)

    def issue_refresh_token(self, user) -> str:
        return self._encode(subject=user.id, email=user.email, role=user.role, token_type=REFRESH, ttl=self.refresh_ttl)

    def issue_pair(self, user) -> dict:
        return {
            "accessToken": self.issue_access_token(user),
            "refreshToken": self.issue_refresh_token(user),
            "tokenType": "Bearer",
            "expiresIn": int(self.access_ttl.total_seconds()),
        }

    def decode(self, token: str, expected_type: str) -> dict:
        """
        Verify signature, issuer, audience, expiry and token class.

        Raises TokenExpiredError or InvalidTokenError.
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError:
            raise InvalidTokenError()

        if claims.get("type") != expected_type or not claims.get("sub"):
            raise InvalidTokenError()
        return claims
