from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .center_model import Center


class CenterRepository(Protocol):
    def get_by_id(self, center_id: int) -> Optional[Center]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Center]:
        raise NotImplementedError
