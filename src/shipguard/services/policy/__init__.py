"""Ship date policy rules."""

from .engine import DistanceThresholds, ShipDatePolicyEngine, day_of_week
from .models import ClearScope, PolicyVerdict, RuleCode

__all__ = [
    "ClearScope",
    "DistanceThresholds",
    "PolicyVerdict",
    "RuleCode",
    "ShipDatePolicyEngine",
    "day_of_week",
]
