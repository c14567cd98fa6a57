from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClassInfo:
    class_id: int
    center_id: int
    name: str
    classroom: Optional[str] = None
    is_archived: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.classroom})" if self.classroom else self.name
