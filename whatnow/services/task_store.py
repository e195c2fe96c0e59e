from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional, Sequence
from uuid import UUID

from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from whatnow.core.clock import utcnow
from whatnow.models.task import Task
from whatnow.services.errors import NotFoundError, StoreError, ValidationError

log = logging.getLogger(__name__)

# in-process owner locks, for dialects without advisory locks (SQLite)
_owner_locks: dict[str, threading.Lock] = {}
_owner_locks_guard = threading.Lock()


def _process_lock(owner_id: str) -> threading.Lock:
    with _owner_locks_guard:
        return _owner_locks.setdefault(owner_id, threading.Lock())


class TaskStore:
    """
    Owner-scoped persistence and state transitions for Task rows.

    Every public operation filters by owner_id, so a foreign id behaves
    exactly like a missing one. Mutations run inside ``atomic()``; nested
    ``atomic()`` blocks join the outermost transaction, which lets a caller
    compose several operations into one commit.

    Mutations that touch the pending order take a per-owner write lock first
    (``pg_advisory_xact_lock`` on PostgreSQL, a process lock elsewhere) and
    hold it until the outermost transaction ends. Row locks alone cannot stop
    two concurrent inserts from picking the same tail position.
    """

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self._clock = clock
        self._depth = 0
        self._locked: set[str] = set()
        self._held: list[threading.Lock] = []

    # ── transactions ──────────────────────────────────────────────
    @contextmanager
    def atomic(self) -> Iterator[Session]:
        if self._depth:
            self._depth += 1
            try:
                yield self.session
                self.session.flush()
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("task store transaction failed")
            raise StoreError("Task store failure") from exc
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._depth = 0
            self._release_owner_locks()

    def lock_owner(self, owner_id: str) -> None:
        """Serialize writers of one owner's pending order until the transaction ends."""
        if not self._depth:
            raise RuntimeError("lock_owner() needs an open atomic() block")
        if owner_id in self._locked:
            return

        if self.session.get_bind().dialect.name == "postgresql":
            try:
                self.session.connection().execute(
                    sql_text("SELECT pg_advisory_xact_lock(hashtext(:owner))"),
                    {"owner": owner_id},
                )
            except SQLAlchemyError as exc:
                log.exception("owner lock failed owner=%s", owner_id)
                raise StoreError("Task store failure") from exc
        else:
            lock = _process_lock(owner_id)
            lock.acquire()
            self._held.append(lock)
        self._locked.add(owner_id)

    def _release_owner_locks(self) -> None:
        # advisory locks end with the transaction itself
        while self._held:
            self._held.pop().release()
        self._locked.clear()

    def _all(self, stmt) -> list[Task]:
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as exc:
            if not self._depth:
                self.session.rollback()
            log.exception("task store query failed")
            raise StoreError("Task store failure") from exc

    def _first(self, stmt) -> Optional[Task]:
        rows = self._all(stmt.limit(1))
        return rows[0] if rows else None

    # ── queries ───────────────────────────────────────────────────
    def _pending(self, owner_id: str, *, lock: bool = False) -> list[Task]:
        stmt = (
            select(Task)
            .where(Task.owner_id == owner_id)
            .where(Task.completed_at.is_(None))
            .where(Task.archived_at.is_(None))
            .order_by(Task.position, Task.created_at)
        )
        if lock:
            self.lock_owner(owner_id)
            stmt = stmt.with_for_update()
        return self._all(stmt)

    @staticmethod
    def _tail(pending: Sequence[Task]) -> int:
        return max((t.position for t in pending), default=-1) + 1

    def _get(self, owner_id: str, task_id: UUID, *, lock: bool = False) -> Optional[Task]:
        stmt = select(Task).where(Task.task_id == task_id, Task.owner_id == owner_id)
        if lock:
            stmt = stmt.with_for_update()
        return self._first(stmt)

    def _renumber(self, ordered: Sequence[Task]) -> None:
        for index, task in enumerate(ordered):
            if task.position != index:
                task.position = index
                self.session.add(task)

    def get(self, owner_id: str, task_id: UUID) -> Optional[Task]:
        return self._get(owner_id, task_id)

    def list_pending(self, owner_id: str, *, lock: bool = False) -> list[Task]:
        return self._pending(owner_id, lock=lock)

    def list_completed(self, owner_id: str) -> list[Task]:
        """Completed and not yet archived, oldest completion first."""
        stmt = (
            select(Task)
            .where(Task.owner_id == owner_id)
            .where(Task.completed_at.is_not(None))
            .where(Task.archived_at.is_(None))
            .order_by(Task.completed_at, Task.position)
        )
        return self._all(stmt)

    def list_archived(self, owner_id: str) -> list[Task]:
        stmt = (
            select(Task)
            .where(Task.owner_id == owner_id)
            .where(Task.archived_at.is_not(None))
            .order_by(Task.archived_at, Task.completed_at)
        )
        return self._all(stmt)

    # ── transitions ───────────────────────────────────────────────
    def create(self, owner_id: str, text: str) -> Task:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Task text must not be empty")

        with self.atomic():
            pending = self._pending(owner_id, lock=True)
            task = Task(
                owner_id=owner_id,
                text=text.strip(),
                position=self._tail(pending),
                created_at=self._clock(),
            )
            self.session.add(task)

        self.session.refresh(task)
        log.debug("task created owner=%s task=%s position=%d", owner_id, task.task_id, task.position)
        return task

    def complete(self, owner_id: str, task_id: UUID) -> Task:
        """
        Mark a pending task done and close the gap it leaves in the order.
        Completing an already-completed task returns it untouched.
        """
        with self.atomic():
            self._pending(owner_id, lock=True)
            task = self._get(owner_id, task_id, lock=True)
            if task is None or task.archived_at is not None:
                raise NotFoundError()

            if task.completed_at is None:
                task.completed_at = self._clock()
                self.session.add(task)
                # autoflush keeps the completed row out of this query
                self._renumber(self._pending(owner_id))

        self.session.refresh(task)
        return task

    def reorder(self, owner_id: str, ordered_ids: Sequence[UUID]) -> list[Task]:
        """
        Give ``ordered_ids[i]`` position ``i``. Pending tasks not named in the
        list follow the listed ones in their current relative order, so the
        pending positions stay 0..N-1. The whole batch is rejected if any id
        is repeated or does not belong to the owner.
        """
        ids = list(ordered_ids)
        if len(set(ids)) != len(ids):
            raise ValidationError("taskIds must not contain duplicates")

        with self.atomic():
            pending = self._pending(owner_id, lock=True)
            owned = {}
            if ids:
                stmt = (
                    select(Task)
                    .where(Task.owner_id == owner_id, Task.task_id.in_(ids))
                    .with_for_update()
                )
                owned = {t.task_id: t for t in self._all(stmt)}

            if len(owned) != len(ids):
                raise ValidationError("taskIds contains an unknown task")

            for index, task_id in enumerate(ids):
                task = owned[task_id]
                task.position = index
                self.session.add(task)

            listed = [owned[i] for i in ids if owned[i].completed_at is None and owned[i].archived_at is None]
            rest = [t for t in pending if t.task_id not in owned]
            ordered = listed + rest
            self._renumber(ordered)

        return ordered

    def archive(self, owner_id: str) -> int:
        """Move every completed, unarchived task of the owner into the bin."""
        with self.atomic():
            stmt = (
                select(Task)
                .where(Task.owner_id == owner_id)
                .where(Task.completed_at.is_not(None))
                .where(Task.archived_at.is_(None))
                .with_for_update()
            )
            rows = self._all(stmt)
            now = self._clock()
            for task in rows:
                task.archived_at = now
                self.session.add(task)

        if rows:
            log.info("archived %d task(s) owner=%s", len(rows), owner_id)
        return len(rows)

    def restore(self, owner_id: str, task_id: UUID) -> Task:
        """Take a task out of the bin and append it to the pending order."""
        with self.atomic():
            pending = self._pending(owner_id, lock=True)
            task = self._get(owner_id, task_id, lock=True)
            if task is None or task.archived_at is None:
                raise NotFoundError()

            task.archived_at = None
            task.completed_at = None
            task.position = self._tail(pending)
            self.session.add(task)

        self.session.refresh(task)
        return task

    def permanent_delete(self, owner_id: str, task_id: UUID) -> None:
        with self.atomic():
            task = self._get(owner_id, task_id, lock=True)
            if task is None or task.archived_at is None:
                raise NotFoundError()
            self.session.delete(task)

        log.info("task deleted owner=%s task=%s", owner_id, task_id)

    def empty_bin(self, owner_id: str) -> int:
        with self.atomic():
            stmt = (
                select(Task)
                .where(Task.owner_id == owner_id)
                .where(Task.archived_at.is_not(None))
                .with_for_update()
            )
            rows = self._all(stmt)
            for task in rows:
                self.session.delete(task)

        if rows:
            log.info("emptied bin: %d task(s) owner=%s", len(rows), owner_id)
        return len(rows)
