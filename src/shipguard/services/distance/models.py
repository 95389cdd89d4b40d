"""Distance resolution result types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import Failure


@dataclass(slots=True)
class DistanceResult:
    miles: Optional[float] = None
    resolved_address: Optional[str] = None
    address_ok: bool = False
    note: Optional[str] = None
    failure: Optional[Failure] = None

    @property
    def resolved(self) -> bool:
        return self.miles is not None

    @classmethod
    def unresolved(cls, failure: Optional[Failure] = None) -> "DistanceResult":
        return cls(failure=failure)
