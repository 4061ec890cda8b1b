from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError
from .money import MAX_AMOUNT, parse_amount, quantize
from .permissions import Role

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PASSWORD_SPECIALS = r"[!@#$%^&*(),.'\":{}|<>?_\-+=\[\]\\/;~`]"

# Largest value an INTEGER column holds (ids, stock, quantities)
MAX_INTEGER = 2_147_483_647


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for create
    - defaults: values applied on create when the field is absent
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    defaults: dict[str, Any] = field(default_factory=dict)


class _FieldErrors:
    def __init__(self):
        self.items: list[dict] = []

    def add(self, field_name: str, message: str) -> None:
        self.items.append({"field": field_name, "message": message})

    def raise_if_any(self) -> None:
        if self.items:
            raise ValidationError("Validation failed", details=self.items)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    # Exact decimals (prices, totals)
    if isinstance(coltype, Numeric):
        try:
            return quantize(parse_amount(value))
        except ValueError:
            raise ValidationError(f"{col.key} must be a number")

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string")
        return str(value).strip()

    # Default: leave as-is
    return value


def coerce_int(name: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{name} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{name} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{name} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{name} must be an integer")
    # Reject floats explicitly
    if isinstance(value, float):
        raise ValidationError(f"{name} must be an integer, not a decimal")
    raise ValidationError(f"{name} must be an integer")


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create, apply defaults)
    partial=True: patch semantics (validate only provided keys)

    All field problems are collected and raised together as one
    ValidationError whose details list every offending field.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    errors = _FieldErrors()
    cols = _columns_by_key(model)

    if not partial:
        for name in sorted(policy.required_on_create):
            if payload.get(name) is None or (isinstance(payload.get(name), str) and not payload[name].strip()):
                errors.add(name, f"{name} is required")

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields or k not in cols:
            errors.add(k, f"Field not allowed: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            continue
        if not partial and k in policy.required_on_create and raw is None:
            continue
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                errors.add(k, f"{k} cannot be null")
                continue
            patch[k] = None
            continue

        try:
            val = _coerce_value(col, raw)
        except ValidationError as e:
            errors.add(k, e.message)
            continue

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                if partial or k not in policy.required_on_create:
                    errors.add(k, f"{k} cannot be blank")
                continue

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                errors.add(k, f"{k} exceeds max length {col.type.length}")
                continue

        patch[k] = val

    errors.raise_if_any()

    if not partial:
        for k, default in policy.defaults.items():
            patch.setdefault(k, default)

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    errors = _FieldErrors()
    if "price" in patch and patch["price"] is not None:
        price = patch["price"]
        if price < 0:
            errors.add("price", "price must be >= 0")
        elif price > MAX_AMOUNT:
            errors.add("price", f"price cannot exceed {MAX_AMOUNT}")
    if "stock" in patch and patch["stock"] is not None:
        if patch["stock"] < 0:
            errors.add("stock", "stock must be >= 0")
        elif patch["stock"] > MAX_INTEGER:
            errors.add("stock", f"stock cannot exceed {MAX_INTEGER}")
    errors.raise_if_any()


def enforce_rules_user(patch: dict) -> None:
    errors = _FieldErrors()
    if "email" in patch:
        patch["email"] = patch["email"].lower()
        if not EMAIL_RE.match(patch["email"]):
            errors.add("email", "Please provide a valid email address")
    if "name" in patch and len(patch["name"]) < 2:
        errors.add("name", "Name must be between 2 and 100 characters")
    if "role" in patch:
        if patch["role"] not in Role.values():
            errors.add("role", f"Role must be one of: {', '.join(Role.values())}")
    errors.raise_if_any()


def validate_password_strength(password: Any) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character

    Raises ValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise ValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise ValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise ValidationError("Password must contain at least one digit")

    if not re.search(PASSWORD_SPECIALS, password):
        raise ValidationError("Password must contain at least one special character")


def parse_pagination(args, *, default_limit: int, max_limit: int) -> tuple[int, int]:
    """Read ?page=&limit= query args; both must be positive and limit <= max_limit."""
    try:
        page = coerce_int("page", args.get("page", 1))
        limit = coerce_int("limit", args.get("limit", default_limit))
    except ValidationError:
        raise ValidationError("Invalid pagination parameters")
    if page < 1 or limit < 1 or limit > max_limit:
        raise ValidationError("Invalid pagination parameters")
    return page, limit
