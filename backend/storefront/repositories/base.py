# Overview: Shared helpers for the per-entity repositories.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..validation import MAX_INTEGER


def paginate(query, page: int | None, limit: int | None) -> tuple[list, int]:
    """
    Apply 1-based page/limit to a query and return (rows, total).

    When page is None the full result set is returned. Pages past the end
    return an empty list.
    """
    if page is None:
        rows = query.all()
        return rows, len(rows)

    total = query.order_by(None).count()
    offset = (page - 1) * limit
    if offset >= total:
        return [], total
    rows = query.offset(offset).limit(limit).all()
    return rows, total


def storable_id(value) -> bool:
    """False for ids no row can have; the driver rejects out-of-range integers."""
    return isinstance(value, int) and 0 < value <= MAX_INTEGER


def like_pattern(term: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class Repository:
    """Base class: holds the session and finishes each write statement."""

    def __init__(self, session):
        self.session = session

    def _finish(self, commit: bool) -> None:
        """
        commit=True: the statement is durable on return (per-statement atomicity).
        commit=False: flush only, the caller owns the transaction.
        """
        try:
            if commit:
                self.session.commit()
            else:
                self.session.flush()
        except SQLAlchemyError:
            self.session.rollback()
            raise
