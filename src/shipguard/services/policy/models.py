"""Policy verdict types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RuleCode(str, Enum):
    WITHIN_RANGE = "within_range"
    DISTANCE_UNKNOWN = "distance_unknown"
    MONDAY_LIMIT = "monday_limit"
    EXTENDED_BAND_SURCHARGE = "extended_band_surcharge"
    EXTENDED_BAND_WRONG_DAY = "extended_band_wrong_day"
    OUT_OF_RANGE = "out_of_range"
    NOT_BLACKED_OUT = "not_blacked_out"
    BLACKOUT_DEFAULT = "blackout_default"
    BLACKOUT_ALTERNATE = "blackout_alternate"
    BLACKOUT_NEW_LINE = "blackout_new_line"
    NOT_APPLICABLE = "not_applicable"


class ClearScope(str, Enum):
    """Which ship-date fields a blocking verdict clears."""

    NONE = "none"
    TRIGGERING_FIELD = "triggering_field"
    HEADER = "header"
    HEADER_AND_LINES = "header_and_lines"


@dataclass(frozen=True, slots=True)
class PolicyVerdict:
    admissible: bool
    enforce: bool
    message: Optional[str]
    rule: RuleCode
    scope: ClearScope = ClearScope.NONE

    @property
    def clear(self) -> bool:
        return not self.admissible and self.enforce

    @property
    def warn_only(self) -> bool:
        return self.message is not None and not self.clear

    @classmethod
    def allow(cls, rule: RuleCode, enforce: bool = False, message: Optional[str] = None) -> "PolicyVerdict":
        return cls(admissible=True, enforce=enforce, message=message, rule=rule)
