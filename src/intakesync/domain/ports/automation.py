"""Port through which any writer participates in automation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from intakesync.domain.automation.types import RuleResult
    from intakesync.domain.model import Entity


@runtime_checkable
class AutomationHooks(Protocol):
    def on_entity_created(self, entity: Entity) -> list[RuleResult]: ...

    def on_entity_updated(self, entity: Entity) -> list[RuleResult]: ...
