"""Trigger → condition → action automation."""

from __future__ import annotations

from .engine import AutomationEngine
from .offsets import (
    DEFAULT_OFFSETS,
    SAME_DAY,
    Direction,
    DueDateOffset,
    calculate_due_date,
    offset_for,
)
from .rules import DEFAULT_RULES
from .types import (
    AutomationContext,
    AutomationRule,
    CreateEventAction,
    CreateTaskAction,
    RuleResult,
    TriggerType,
)

__all__ = [
    "DEFAULT_OFFSETS",
    "DEFAULT_RULES",
    "SAME_DAY",
    "AutomationContext",
    "AutomationEngine",
    "AutomationRule",
    "CreateEventAction",
    "CreateTaskAction",
    "Direction",
    "DueDateOffset",
    "RuleResult",
    "TriggerType",
    "calculate_due_date",
    "offset_for",
]
