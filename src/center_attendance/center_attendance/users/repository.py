from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        username: str,
        password_hash: str,
        role: Role,
        phone: Optional[str] = None,
        mother_phone: Optional[str] = None,
        father_phone: Optional[str] = None,
        grade: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def link_center(self, *, user_id: int, center_id: int) -> None:
        raise NotImplementedError

    def list_for_center(self, center_id: int, *, roles: Iterable[Role]) -> Sequence[User]:
        """Active users of a center with one of the given roles, ordered by user id."""
        raise NotImplementedError
