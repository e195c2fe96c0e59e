from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, TypeVar
from uuid import UUID

from whatnow.core.clock import as_utc, utcnow
from whatnow.models.task import Task
from whatnow.services.errors import NotFoundError, ValidationError
from whatnow.services.task_store import TaskStore

log = logging.getLogger(__name__)

T = TypeVar("T")


def rotate_left(seq: Sequence[T]) -> list[T]:
    """[t0, t1, ..., tn] -> [t1, ..., tn, t0]; sequences of length <= 1 are returned as-is."""
    items = list(seq)
    if len(items) <= 1:
        return items
    return items[1:] + items[:1]


def _parse_task_ids(raw: Any) -> list[UUID]:
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("taskIds must be an array")

    ids: list[UUID] = []
    for value in raw:
        if isinstance(value, UUID):
            ids.append(value)
            continue
        if not isinstance(value, str):
            raise ValidationError("taskIds must contain task id strings")
        try:
            ids.append(UUID(value))
        except ValueError:
            raise ValidationError(f"invalid task id: {value!r}")
    return ids


class TaskListService:
    """
    What the client calls. The current task is always the head of the
    pending order; nothing else about "where the user is" is stored.
    """

    def __init__(self, store: TaskStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self._clock = clock

    # ── views ─────────────────────────────────────────────────────
    def list_pending(self, owner_id: str) -> list[Task]:
        return self.store.list_pending(owner_id)

    def list_completed(self, owner_id: str) -> list[Task]:
        return self.store.list_completed(owner_id)

    def list_archived(self, owner_id: str) -> list[Task]:
        return self.store.list_archived(owner_id)

    def current_task(self, owner_id: str) -> Optional[Task]:
        pending = self.store.list_pending(owner_id)
        return pending[0] if pending else None

    def list_completed_today(self, owner_id: str) -> list[Task]:
        # day boundaries are UTC whatever zone the clock reports in
        today = as_utc(self._clock()).date()
        return [
            t for t in self.store.list_completed(owner_id)
            if t.completed_at is not None and as_utc(t.completed_at).date() == today
        ]

    # ── actions ───────────────────────────────────────────────────
    def add_task(self, owner_id: str, text: Any) -> Task:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Task text must not be empty")
        return self.store.create(owner_id, text.strip())

    def complete_task(self, owner_id: str, task_id: UUID) -> Task:
        return self.store.complete(owner_id, task_id)

    def complete_current(self, owner_id: str) -> tuple[Task, Optional[Task]]:
        """Finish the head task; returns it together with the new head."""
        with self.store.atomic():
            pending = self.store.list_pending(owner_id, lock=True)
            current = pending[0] if pending else None
            if current is None:
                raise NotFoundError("No current task")
            done = self.store.complete(owner_id, current.task_id)
            upcoming = self.current_task(owner_id)
        return done, upcoming

    def skip(self, owner_id: str) -> list[Task]:
        """
        Move the current task to the end of the order.

        The rotation is applied to the full pending order as read inside the
        transaction, then written back through ``reorder``, so sparse or stale
        positions never leak into the result.
        """
        with self.store.atomic():
            pending = self.store.list_pending(owner_id, lock=True)
            if len(pending) <= 1:
                return pending
            rotated = rotate_left(pending)
            ordered = self.store.reorder(owner_id, [t.task_id for t in rotated])

        log.debug("skipped task owner=%s task=%s", owner_id, pending[0].task_id)
        return ordered

    def reorder(self, owner_id: str, task_ids: Any) -> list[Task]:
        return self.store.reorder(owner_id, _parse_task_ids(task_ids))

    def archive_completed(self, owner_id: str) -> int:
        return self.store.archive(owner_id)

    def restore(self, owner_id: str, task_id: UUID) -> Task:
        return self.store.restore(owner_id, task_id)

    def permanent_delete(self, owner_id: str, task_id: UUID) -> None:
        self.store.permanent_delete(owner_id, task_id)

    def empty_bin(self, owner_id: str) -> int:
        return self.store.empty_bin(owner_id)
