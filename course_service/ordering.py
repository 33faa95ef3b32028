"""Lesson ordering policies.

A policy receives the active lessons of one course and plans either room for
a new lesson at ``order`` or the move of an existing lesson to ``new_order``.
Plans are lists of ``(lesson, new_order)`` pairs; the policy never touches a
lesson itself. The owning course applies a plan only once everything else the
operation needs has succeeded, so a failing call leaves the lessons as they
were.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple

from .errors import Conflict, InvalidArgument

if TYPE_CHECKING:
    from .domain import Lesson

Plan = List[Tuple["Lesson", int]]


class OrderingPolicy(ABC):
    name = ""

    @abstractmethod
    def make_room(self, lessons: Sequence["Lesson"], order: int) -> Plan:
        """Plan the changes needed before a lesson is inserted at ``order``."""

    @abstractmethod
    def move(self, lessons: Sequence["Lesson"], lesson: "Lesson", new_order: int) -> Plan:
        """Plan the changes that put ``lesson`` at ``new_order``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ShiftPolicy(OrderingPolicy):
    """Renumber neighbours so inserts and moves never collide."""

    name = "shift"

    def make_room(self, lessons, order):
        subsequent = sorted(
            (l for l in lessons if l.order >= order), key=lambda l: l.order
        )
        return [(l, l.order + 1) for l in subsequent]

    def move(self, lessons, lesson, new_order):
        current = lesson.order
        others = [l for l in lessons if l.id != lesson.id]
        if new_order < current:
            plan = [(l, l.order + 1) for l in others if new_order <= l.order < current]
        else:
            plan = [(l, l.order - 1) for l in others if current < l.order <= new_order]
        plan.append((lesson, new_order))
        return plan


class RejectPolicy(OrderingPolicy):
    """Refuse any insert or move onto an order held by another active lesson."""

    name = "reject"

    def make_room(self, lessons, order):
        if any(l.order == order for l in lessons):
            raise Conflict("a lesson with this order already exists")
        return []

    def move(self, lessons, lesson, new_order):
        if any(l.order == new_order and l.id != lesson.id for l in lessons):
            raise Conflict("a lesson with this order already exists")
        return [(lesson, new_order)]


_POLICIES: Dict[str, OrderingPolicy] = {
    ShiftPolicy.name: ShiftPolicy(),
    RejectPolicy.name: RejectPolicy(),
}


def get_policy(name: str) -> OrderingPolicy:
    key = (name or "").strip().lower()
    try:
        return _POLICIES[key]
    except KeyError:
        raise InvalidArgument(
            f"unknown ordering policy '{name}', expected one of {sorted(_POLICIES)}"
        ) from None


__all__ = ["OrderingPolicy", "ShiftPolicy", "RejectPolicy", "get_policy"]
