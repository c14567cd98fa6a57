from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence, Tuple


class MaintenanceRepository(Protocol):
    def get_setting(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def list_student_grades(self) -> Sequence[Tuple[int, str]]:
        """(user_id, grade) of active students that have a grade."""
        raise NotImplementedError

    def apply_grade_promotion(self, year: int, changes: Mapping[int, str], *, watermark_key: str) -> bool:
        """Apply grade changes and write the watermark in one transaction.

        Returns False without changing anything when the watermark already
        reached `year` (another process promoted first).
        """
        raise NotImplementedError
