"""
core/lifecycle.py — Entity lifecycle rules.

Every managed entity moves active -> inactive -> (optionally) deleted.
Deactivation is a plain flag write that may cascade to children; hard
deletion is only allowed once the entity is inactive and nothing depends
on it any more.
"""

from enum import Enum
from typing import Iterable, Mapping

from core.errors import ValidationError


class LifecycleState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"


_ALLOWED = {
    LifecycleState.ACTIVE: {LifecycleState.INACTIVE},
    LifecycleState.INACTIVE: {LifecycleState.ACTIVE, LifecycleState.DELETED},
    LifecycleState.DELETED: set(),
}


def state_of(entity) -> LifecycleState:
    return LifecycleState.ACTIVE if entity.active else LifecycleState.INACTIVE


def can_transition(current: LifecycleState, target: LifecycleState) -> bool:
    return target == current or target in _ALLOWED[current]


def ensure_deletable(entity_label: str, entity, dependents: Mapping[str, int]) -> None:
    """Raise ValidationError unless the entity may be hard-deleted.

    ``dependents`` maps a child description ("software", "LPARs") to the
    number of rows still referencing the entity.
    """
    if not can_transition(state_of(entity), LifecycleState.DELETED):
        raise ValidationError(
            f"{entity_label} must be deactivated before it can be deleted", field="active"
        )
    blocking = [f"{count} {name}" for name, count in dependents.items() if count]
    if blocking:
        raise ValidationError(
            f"{entity_label} cannot be deleted while referenced by {', '.join(blocking)}"
        )


def cascade_deactivate(children: Iterable) -> list:
    """Deactivate every still-active child; returns the children that changed."""
    changed = []
    for child in children:
        if child.active:
            child.active = False
            changed.append(child)
    return changed
