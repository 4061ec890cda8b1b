# Overview: User-management rules that sit above the user repository.

from __future__ import annotations

from ..errors import ValidationError
from ..permissions import Principal
from ..repositories.users import ADMIN_POLICY, UserRepository

MIN_SEARCH_LENGTH = 2


def deactivate_user(users: UserRepository, actor: Principal, target_id: str):
    """
    Soft-delete another user's account.

    Self-deactivation is refused before any store access so an admin can
    never lock themselves out.
    """
    if str(target_id) == actor.id:
        raise ValidationError("You cannot deactivate your own account")
    return users.deactivate(target_id)


def admin_update_user(users: UserRepository, actor: Principal, target_id: str, payload: dict):
    """Admin edit of any user field; an admin cannot deactivate themselves this way either."""
    if str(target_id) == actor.id and isinstance(payload, dict) and payload.get("is_active") is False:
        raise ValidationError("You cannot deactivate your own account")
    return users.update(target_id, payload, policy=ADMIN_POLICY)


def search_users(users: UserRepository, term: str | None, page: int, limit: int):
    term = (term or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        raise ValidationError(f"Search term must be at least {MIN_SEARCH_LENGTH} characters")
    return users.list(page=page, limit=limit, search=term)
