"""Persistence-layer record schemas."""

from __future__ import annotations

from pydantic import BaseModel

from getback.domain.enums import Direction, OrphanKind


class OrphanRecord(BaseModel):
    """A trip write that committed without its matching user-list append."""

    orphan_id: int
    kind: OrphanKind
    direction: Direction
    trip_id: str
    email: str
    reason: str = ""
    created_at: str
    resolved: bool = False


__all__ = ["OrphanRecord"]
