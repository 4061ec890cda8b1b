# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/storefront/routes/auth.py
"""
Authentication API routes

- Self-registration always creates a "user" account
- Login throttling locks an email after repeated failures (429)
- Access + refresh JWT pair on login; refresh endpoint rotates both
- Logout is an acknowledgement only: tokens are stateless and expire on their own
"""

from flask import Blueprint, request, g

from ..decorators import require_auth
from ..extensions import get_container
from ..errors import NotFoundError
from ..repositories.users import PROFILE_POLICY
from ..responses import success_response
from .common import json_body


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Register a new account.

    Body: name, email, password (required); phone, department, position (optional).
    """
    user = get_container().auth.register(json_body())
    return success_response("User registered successfully", {"user": user.to_dict()}, 201)


@auth_bp.post("/login")
def login_route():
    """
    Authenticate with email + password and receive a token pair.

    Returns 429 once the email is locked out after repeated failures.
    """
    data = json_body()
    user, tokens = get_container().auth.login(
        data.get("email"),
        data.get("password"),
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    return success_response("Login successful", {"user": user.to_dict(), "tokens": tokens})


@auth_bp.post("/refresh-token")
def refresh_token_route():
    """Exchange a refresh token (body: refreshToken) for a new token pair."""
    data = json_body()
    token = data.get("refreshToken") or data.get("refresh_token")
    tokens = get_container().auth.refresh(token)
    return success_response("Token refreshed successfully", {"tokens": tokens})


@auth_bp.post("/logout")
@require_auth
def logout_route():
    return success_response("Logout successful")


@auth_bp.get("/profile")
@require_auth
def get_profile_route():
    user = get_container().users.get_by_id(g.principal.id)
    if user is None:
        raise NotFoundError("User not found")
    return success_response("Profile retrieved successfully", {"user": user.to_dict()})


@auth_bp.put("/profile")
@require_auth
def update_profile_route():
    """Self-service edit of name, phone, department and position."""
    user = get_container().users.update(g.principal.id, json_body(), policy=PROFILE_POLICY)
    return success_response("Profile updated successfully", {"user": user.to_dict()})


@auth_bp.put("/change-password")
@require_auth
def change_password_route():
    data = json_body()
    get_container().auth.change_password(
        g.principal.id,
        data.get("currentPassword"),
        data.get("newPassword"),
    )
    return success_response("Password changed successfully")
