"""Caller identity resolution."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.models import User

_MISSING = {"", "undefined", "null", "none"}


def parse_uuid(raw: str | UUID | None) -> UUID | None:
    """Parse a native id, returning None for anything that is not one."""
    if raw is None:
        return None
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw).strip())
    except ValueError:
        return None


async def resolve_user_id(session: AsyncSession, raw: str | UUID | None) -> UUID | None:
    """Map a caller-supplied user reference onto a canonical user id.

    Accepts a native UUID string or an identity-provider UID stored in
    ``User.external_uid``. Missing values, the literal ``"undefined"`` sent
    by some clients, and unknown UIDs all resolve to None; callers treat
    that as "matches nothing".
    """
    if raw is None or str(raw).strip().lower() in _MISSING:
        return None

    native = parse_uuid(raw)
    if native is not None:
        return native

    return await session.scalar(select(User.user_id).where(User.external_uid == str(raw).strip()))
