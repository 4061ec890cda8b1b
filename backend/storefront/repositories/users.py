# backend/storefront/repositories/users.py
from __future__ import annotations

from sqlalchemy import or_

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import User
from ..permissions import Role
from ..validation import ModelValidationPolicy, enforce_rules_user, validate_payload
from .base import Repository, like_pattern, paginate

# Registration: what a new user may supply about themselves
REGISTRATION_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "email", "phone", "department", "position"}),
    required_on_create=frozenset({"name", "email"}),
    defaults={"phone": None, "department": None, "position": None},
)

# Self-service profile edits
PROFILE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "phone", "department", "position"}),
)

# Admin edits, including role and activation
ADMIN_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "phone", "role", "department", "position", "is_active"}),
)


class UserRepository(Repository):

    def list(
        self,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
    ) -> tuple[list[User], int]:
        """Newest-first user listing; search matches name OR email."""
        query = self.session.query(User)
        if search:
            pattern = like_pattern(search)
            query = query.filter(or_(
                User.name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            ))
        query = query.order_by(User.created_at.desc(), User.id.desc())
        return paginate(query, page, limit)

    def get_by_id(self, user_id: str) -> User | None:
        if not user_id:
            return None
        return self.session.get(User, str(user_id))

    def get_by_email(self, email: str) -> User | None:
        if not email:
            return None
        return self.session.query(User).filter(User.email == email.strip().lower()).first()

    def create(
        self,
        payload: dict,
        *,
        password_hash: str,
        role: Role = Role.USER,
        commit: bool = True,
    ) -> User:
        """
        Insert a new active user.

        role is never read from the payload; only trusted callers (CLI,
        admin tooling) pass something other than Role.USER.
        """
        patch = validate_payload(model=User, payload=payload, policy=REGISTRATION_POLICY, partial=False)
        enforce_rules_user(patch)

        if self.get_by_email(patch["email"]) is not None:
            raise ConflictError("User with this email already exists")

        user = User(**patch, password_hash=password_hash, role=Role(role).value, is_active=True)
        self.session.add(user)
        self._finish(commit)
        return user

    def update(
        self,
        user_id: str,
        payload: dict,
        *,
        policy: ModelValidationPolicy = PROFILE_POLICY,
        commit: bool = True,
    ) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        patch = validate_payload(model=User, payload=payload, policy=policy, partial=True)
        if not patch:
            raise ValidationError("Nothing to update")
        enforce_rules_user(patch)

        for k, v in patch.items():
            setattr(user, k, v)
        self._finish(commit)
        return user

    def update_password(self, user_id: str, password_hash: str, *, commit: bool = True) -> None:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        user.password_hash = password_hash
        self._finish(commit)

    def deactivate(self, user_id: str, *, commit: bool = True) -> User:
        """Soft-delete: the row stays, is_active goes false."""
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        user.is_active = False
        self._finish(commit)
        return user
