from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassInfo


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[ClassInfo]:
        raise NotImplementedError

    def list_active_for_student(self, student_id: int, center_id: int) -> Sequence[ClassInfo]:
        """Non-archived classes of the center the student is enrolled in."""
        raise NotImplementedError
