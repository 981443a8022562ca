"""Stateless rule evaluator invoked after a triggering write commits."""

from __future__ import annotations

from datetime import datetime
from functools import singledispatch
from logging import getLogger
from typing import TYPE_CHECKING

from intakesync.domain.automation.offsets import DueDateOffset, offset_for
from intakesync.domain.automation.rules import DEFAULT_RULES
from intakesync.domain.automation.types import (
    AutomationContext,
    CreateEventAction,
    CreateTaskAction,
    RuleResult,
    TriggerType,
)
from intakesync.domain.model import Client, Event, Task, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from intakesync.domain.automation.types import Action, AutomationRule
    from intakesync.domain.model import Entity
    from intakesync.domain.ports import AutomationHooks, IntakeUnitOfWorkFactory

log = getLogger(__name__)


@singledispatch
def _context_for(entity: object, trigger: TriggerType, at: datetime) -> AutomationContext:  # noqa: ARG001
    raise TypeError(f"No automation context for {type(entity).__name__}")


@_context_for.register
def _(entity: Client, trigger: TriggerType, at: datetime) -> AutomationContext:
    return AutomationContext(trigger=trigger, at=at, client=entity)


@_context_for.register
def _(entity: Event, trigger: TriggerType, at: datetime) -> AutomationContext:
    return AutomationContext(trigger=trigger, at=at, event=entity)


@_context_for.register
def _(entity: Task, trigger: TriggerType, at: datetime) -> AutomationContext:
    return AutomationContext(trigger=trigger, at=at, task=entity)


class AutomationEngine:
    """Runs registered rules for a trigger in registration order.

    Each action writes in its own unit of work; a failing action is recorded on
    its rule result and never stops later actions or rules.
    """

    def __init__(
        self,
        unit_of_work_factory: IntakeUnitOfWorkFactory,
        *,
        rules: Iterable[AutomationRule] = DEFAULT_RULES,
        offsets: Mapping[str, DueDateOffset] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._rules: list[AutomationRule] = list(rules)
        self._offsets = dict(offsets or {})
        self._clock = clock

    def register(self, rule: AutomationRule) -> None:
        self._rules.append(rule)

    def rules_for(self, trigger: TriggerType) -> list[AutomationRule]:
        return [rule for rule in self._rules if rule.enabled and rule.trigger is trigger]

    def execute(self, trigger: TriggerType, context: AutomationContext) -> list[RuleResult]:
        results: list[RuleResult] = []
        for rule in self.rules_for(trigger):
            try:
                applies = rule.condition(context)
            except Exception as exc:  # noqa: BLE001
                log.warning("Condition of rule %s failed: %s", rule.rule_id, exc)
                results.append(RuleResult(rule_id=rule.rule_id, success=False, errors=[str(exc)]))
                continue
            if not applies:
                continue

            result = RuleResult(rule_id=rule.rule_id)
            for action in rule.actions:
                try:
                    created = self._run_action(action, context)
                except Exception as exc:  # noqa: BLE001
                    log.warning(
                        "Action %s of rule %s failed: %s", type(action).__name__, rule.rule_id, exc
                    )
                    result.success = False
                    result.errors.append(f"{type(action).__name__}: {exc}")
                    continue
                result.actions_executed += 1
                result.created.append(created)
            log.info(
                "Rule %s ran for %s: executed=%s, errors=%s",
                rule.rule_id,
                trigger,
                result.actions_executed,
                len(result.errors),
            )
            results.append(result)
        return results

    def on_entity_created(self, entity: Entity) -> list[RuleResult]:
        return self._dispatch(entity, "created")

    def on_entity_updated(self, entity: Entity) -> list[RuleResult]:
        return self._dispatch(entity, "updated")

    def _dispatch(self, entity: Entity, change: str) -> list[RuleResult]:
        try:
            trigger = TriggerType(f"{entity.entity_type}.{change}")
        except ValueError:
            log.debug("No automation trigger for %s %s", entity.entity_type, change)
            return []
        return self.execute(trigger, _context_for(entity, trigger, self._clock()))

    def _run_action(self, action: Action, context: AutomationContext) -> Task | Event:
        if isinstance(action, CreateTaskAction):
            return self._create_task(action, context)
        return self._create_event(action, context)

    def _create_task(self, action: CreateTaskAction, context: AutomationContext) -> Task:
        offset = action.offset or offset_for(action.automated_action, self._offsets)
        task = Task(
            description=action.description,
            due_date=offset.apply(context.reference_date),
            priority=action.priority,
            client_id=context.client_id,
            event_id=context.event.id if context.event is not None else None,
            automated_action=action.automated_action.value,
            triggered_by=action.triggered_by,
        )
        with self._unit_of_work_factory() as uow:
            uow.repositories.tasks.add(task)
            uow.commit()
        return task

    def _create_event(self, action: CreateEventAction, context: AutomationContext) -> Event:
        client_id = action.client_id or context.client_id
        if client_id is None:
            raise ValueError("Cannot create an event without a client")
        parent_id = action.parent_event_id
        if parent_id is None and context.event is not None:
            parent_id = context.event.id
        event = Event(
            client_id=client_id,
            event_type=action.event_type,
            date=action.date or context.at,
            notes=action.notes,
            parent_event_id=parent_id,
        )
        with self._unit_of_work_factory() as uow:
            uow.repositories.events.add(event)
            uow.commit()
        return event


if TYPE_CHECKING:

    def _hooks_check(engine: AutomationEngine) -> AutomationHooks:
        return engine
