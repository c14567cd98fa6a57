from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import OwnerKind
from .model import AttendanceCode


class AttendanceCodeRepository(Protocol):
    def get_by_id(self, code_id: int) -> Optional[AttendanceCode]:
        raise NotImplementedError

    def find_active(self, center_id: int, code: str) -> Optional[AttendanceCode]:
        raise NotImplementedError

    def find_active_for_owner(self, center_id: int, owner_id: int, owner_kind: OwnerKind) -> Optional[AttendanceCode]:
        raise NotImplementedError

    def replace_active(self, *, center_id: int, owner_id: int, owner_kind: OwnerKind, code: str) -> AttendanceCode:
        """Deactivate the owner's current code and insert the new one, atomically.

        Raises DuplicateRecordError when the code is active for someone else;
        the owner's previous code then stays active. A STAFF code is copied to
        the owner's staff_check_in_settings row in the same transaction.
        """
        raise NotImplementedError

    def deactivate(self, code_id: int) -> bool:
        """Deactivating a STAFF code also deactivates its staff_check_in_settings row."""
        raise NotImplementedError

    def deactivate_for_owner(self, center_id: int, owner_id: int, owner_kind: OwnerKind) -> int:
        """Same staff_check_in_settings rule as deactivate()."""
        raise NotImplementedError

    def list_active(self, center_id: int) -> Sequence[AttendanceCode]:
        raise NotImplementedError
