"""
Login Throttling Service

WHY: Prevent brute-force password attacks by limiting failed login attempts.
After too many failures, the account is temporarily locked.

- Tracks failed attempts per email
- Lockout after max_failed_attempts failures within the lockout window
- Uses the security_events table for tracking
- A successful login is recorded too, but old failures are not cleared
"""
from __future__ import annotations

from datetime import timedelta

from ..models import SecurityEvent
from storefront.time_utils import utcnow


class LoginThrottle:

    def __init__(self, session, *, max_failed_attempts: int, lockout_window: timedelta):
        self.session = session
        self.max_failed_attempts = max_failed_attempts
        self.lockout_window = lockout_window

    @staticmethod
    def _normalize(identifier: str) -> str:
        return (identifier or "").strip().lower()

    def get_recent_failed_attempts(self, identifier: str) -> int:
        """Count LOGIN_FAILED events for this identifier within the lockout window."""
        cutoff = utcnow() - self.lockout_window
        return self.session.query(SecurityEvent).filter(
            SecurityEvent.event_type == "LOGIN_FAILED",
            SecurityEvent.action == self._normalize(identifier),
            SecurityEvent.occurred_at >= cutoff,
        ).count()

    def is_locked(self, identifier: str) -> tuple[bool, int | None]:
        """
        Returns:
        - (True, seconds_remaining) if locked
        - (False, None) if not locked
        """
        if self.get_recent_failed_attempts(identifier) < self.max_failed_attempts:
            return False, None

        most_recent = self.session.query(SecurityEvent).filter(
            SecurityEvent.event_type == "LOGIN_FAILED",
            SecurityEvent.action == self._normalize(identifier),
        ).order_by(SecurityEvent.occurred_at.desc()).first()

        if most_recent:
            lockout_end = most_recent.occurred_at + self.lockout_window
            now = utcnow()
            if now < lockout_end:
                return True, int((lockout_end - now).total_seconds())

        return False, None

    def record_failed_attempt(
        self,
        identifier: str,
        *,
        user_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        reason: str = "Invalid credentials",
    ) -> int:
        """Record a failed login attempt and return the recent failure count."""
        self.session.add(SecurityEvent(
            user_id=user_id,
            event_type="LOGIN_FAILED",
            resource="/api/auth/login",
            action=self._normalize(identifier),
            success=False,
            reason=reason,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:255] or None,
            occurred_at=utcnow(),
        ))
        self.session.commit()
        return self.get_recent_failed_attempts(identifier)

    def record_successful_login(
        self,
        identifier: str,
        *,
        user_id: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        self.session.add(SecurityEvent(
            user_id=user_id,
            event_type="LOGIN_SUCCESS",
            resource="/api/auth/login",
            action=self._normalize(identifier),
            success=True,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:255] or None,
            occurred_at=utcnow(),
        ))
        self.session.commit()
