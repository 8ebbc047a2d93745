from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import BeadleSlip, NewBeadleSlip


class SlipRepository(Protocol):
    def create(self, slip: NewBeadleSlip) -> int:
        raise NotImplementedError

    def get_by_id(self, slip_id: int) -> Optional[BeadleSlip]:
        raise NotImplementedError

    def list_slips(
        self,
        *,
        beadle_user_id: Optional[int] = None,
        grade_levels: Optional[Sequence[str]] = None,
        slip_date: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[BeadleSlip]:
        """Newest first."""

        raise NotImplementedError
