from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import OwnerKind, ResolutionSource


@dataclass(frozen=True)
class AttendanceCode:
    """A 4-digit code owned by one student or staff member inside a center."""

    code_id: int
    center_id: int
    owner_id: int
    owner_kind: OwnerKind
    code: str
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Resolution:
    """Who a pad code belongs to, and which lookup step found them."""

    kind: OwnerKind
    owner_id: int
    via: ResolutionSource


@dataclass(frozen=True)
class SkippedOwner:
    owner_id: int
    full_name: str
    reason: str


@dataclass
class AutoGenerateResult:
    created: list[AttendanceCode] = field(default_factory=list)
    skipped: list[SkippedOwner] = field(default_factory=list)
