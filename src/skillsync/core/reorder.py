"""Ordered skill list and optimistic reordering."""

import logging
from typing import TYPE_CHECKING, Iterable, Iterator, TypeVar

from skillsync.core.errors import BackendError
from skillsync.core.models import Skill
from skillsync.core.optimistic import with_optimistic_update

if TYPE_CHECKING:
    from skillsync.backend.base import Backend
    from skillsync.frontend.base import Frontend

logger = logging.getLogger(__name__)

T = TypeVar("T")

OrderingSnapshot = tuple[Skill, ...]

REORDER_FAILED_MESSAGE = "Failed to reorder skills"


def move_item(items: list[T], from_index: int, to_index: int) -> list[T]:
    """Return a copy of ``items`` with one element moved (not swapped)."""
    result = list(items)
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


class SkillList:
    """
    Process-wide ordered list of skills.

    Positions always mirror list order (0..n-1) and are renumbered on every
    replacement.
    """

    def __init__(self, skills: Iterable[Skill] = ()):
        self._items: list[Skill] = []
        self.replace(skills)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Skill]:
        return iter(list(self._items))

    @property
    def items(self) -> list[Skill]:
        return list(self._items)

    @property
    def ids(self) -> list[str]:
        return [skill.id for skill in self._items]

    def replace(self, skills: Iterable[Skill]) -> None:
        self._items = list(skills)
        for position, skill in enumerate(self._items):
            skill.position = position

    def snapshot(self) -> OrderingSnapshot:
        return tuple(self._items)

    def restore(self, snapshot: OrderingSnapshot) -> None:
        self.replace(snapshot)

    def index_of(self, skill_id: str) -> int:
        for i, skill in enumerate(self._items):
            if skill.id == skill_id:
                return i
        return -1

    def get(self, skill_id: str) -> Skill | None:
        index = self.index_of(skill_id)
        return self._items[index] if index != -1 else None

    def find(self, ref: str) -> Skill | None:
        """Look a skill up by id first, then by display name."""
        skill = self.get(ref)
        if skill is not None:
            return skill
        for skill in self._items:
            if skill.name == ref:
                return skill
        return None

    def upsert(self, skill: Skill) -> None:
        """Replace the skill with the same id in place, or append it."""
        index = self.index_of(skill.id)
        items = list(self._items)
        if index == -1:
            items.append(skill)
        else:
            items[index] = skill
        self.replace(items)

    def remove(self, skill_id: str) -> bool:
        index = self.index_of(skill_id)
        if index == -1:
            return False
        items = list(self._items)
        del items[index]
        self.replace(items)
        return True


class ReorderCoordinator:
    """
    Reorders skills optimistically.

    The new order is visible in the SkillList before the backend is contacted.
    If persisting fails, the exact pre-move snapshot is restored and a generic
    failure notice is shown, so an order that did not persist never stays
    visible.
    """

    def __init__(self, skills: SkillList, backend: "Backend", frontend: "Frontend"):
        self.skills = skills
        self.backend = backend
        self.frontend = frontend

    async def reorder(self, from_index: int, to_index: int) -> bool:
        """
        Move the skill at ``from_index`` to ``to_index``.

        Out-of-range indices and ``from_index == to_index`` are silent no-ops
        that never contact the backend.

        Returns:
            True if a new order was persisted, False otherwise
        """
        count = len(self.skills)
        if from_index == to_index:
            return False
        if not (0 <= from_index < count and 0 <= to_index < count):
            logger.debug(f"Ignoring reorder {from_index} -> {to_index} of {count}")
            return False

        snapshot = self.skills.snapshot()
        new_order = move_item(list(snapshot), from_index, to_index)

        try:
            await with_optimistic_update(
                apply=lambda: self.skills.replace(new_order),
                persist=lambda: self.backend.persist_order(
                    [skill.id for skill in new_order]
                ),
                rollback=lambda: self.skills.restore(snapshot),
            )
        except BackendError as e:
            logger.error(f"Failed to reorder skills: {e}")
            await self.frontend.show_error(REORDER_FAILED_MESSAGE)
            return False

        await self.backend.try_refresh_external_menu()
        return True

    async def reorder_by_id(self, active_id: str, over_id: str) -> bool:
        """Move skill ``active_id`` to where ``over_id`` currently sits."""
        if active_id == over_id:
            return False

        from_index = self.skills.index_of(active_id)
        to_index = self.skills.index_of(over_id)
        if from_index == -1 or to_index == -1:
            return False

        return await self.reorder(from_index, to_index)
