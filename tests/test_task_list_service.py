import uuid
from datetime import datetime, timedelta, timezone

import pytest

from conftest import OTHER, OWNER
from whatnow.services.errors import NotFoundError, ValidationError
from whatnow.services.task_list import rotate_left


def _texts(tasks):
    return [t.text for t in tasks]


@pytest.mark.parametrize(
    ("seq", "expected"),
    [
        ([], []),
        (["a"], ["a"]),
        (["a", "b"], ["b", "a"]),
        (["a", "b", "c", "d"], ["b", "c", "d", "a"]),
    ],
)
def test_rotate_left(seq, expected):
    assert rotate_left(seq) == expected


def test_rotate_left_does_not_mutate_input():
    seq = ["a", "b", "c"]
    rotate_left(seq)
    assert seq == ["a", "b", "c"]


def test_current_task_is_head_of_pending(service):
    assert service.current_task(OWNER) is None

    service.add_task(OWNER, "A")
    service.add_task(OWNER, "B")

    assert service.current_task(OWNER).text == "A"


def test_add_task_validates_text(service):
    with pytest.raises(ValidationError):
        service.add_task(OWNER, "    ")
    with pytest.raises(ValidationError):
        service.add_task(OWNER, 42)

    assert service.add_task(OWNER, "  call mum ").text == "call mum"


def test_skip_rotates_head_to_tail(service):
    for text in ("A", "B", "C"):
        service.add_task(OWNER, text)

    ordered = service.skip(OWNER)

    assert _texts(ordered) == ["B", "C", "A"]
    pending = service.list_pending(OWNER)
    assert _texts(pending) == ["B", "C", "A"]
    assert [t.position for t in pending] == [0, 1, 2]
    assert service.current_task(OWNER).text == "B"


@pytest.mark.parametrize("count", [0, 1])
def test_skip_is_noop_for_short_lists(service, count):
    for i in range(count):
        service.add_task(OWNER, f"T{i}")
    before = [(t.task_id, t.position) for t in service.list_pending(OWNER)]

    service.skip(OWNER)

    assert [(t.task_id, t.position) for t in service.list_pending(OWNER)] == before


def test_skip_n_plus_one_times_restores_order(service):
    texts = ["A", "B", "C", "D", "E"]
    for text in texts:
        service.add_task(OWNER, text)

    for _ in range(len(texts)):
        service.skip(OWNER)

    assert _texts(service.list_pending(OWNER)) == texts


def test_skip_uses_order_not_position_arithmetic(service, store, session):
    a = service.add_task(OWNER, "A")
    b = service.add_task(OWNER, "B")
    c = service.add_task(OWNER, "C")
    # sparse positions, as left behind by an older writer
    for task, position in ((a, 3), (b, 10), (c, 42)):
        task.position = position
        session.add(task)
    session.commit()

    service.skip(OWNER)

    pending = service.list_pending(OWNER)
    assert _texts(pending) == ["B", "C", "A"]
    assert [t.position for t in pending] == [0, 1, 2]


def test_skip_only_affects_caller(service):
    for text in ("A", "B"):
        service.add_task(OWNER, text)
    for text in ("X", "Y"):
        service.add_task(OTHER, text)

    service.skip(OWNER)

    assert _texts(service.list_pending(OTHER)) == ["X", "Y"]


def test_complete_current_advances_to_next(service):
    for text in ("A", "B", "C"):
        service.add_task(OWNER, text)
    service.skip(OWNER)

    done, upcoming = service.complete_current(OWNER)

    assert done.text == "B"
    assert done.completed_at is not None
    assert upcoming.text == "C"
    assert _texts(service.list_pending(OWNER)) == ["C", "A"]


def test_complete_current_last_task_leaves_nothing(service):
    service.add_task(OWNER, "A")

    done, upcoming = service.complete_current(OWNER)

    assert done.text == "A"
    assert upcoming is None
    assert service.current_task(OWNER) is None


def test_complete_current_without_tasks_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.complete_current(OWNER)


def test_completed_today_uses_utc_calendar_day(service, clock):
    late = service.add_task(OWNER, "late night")
    early = service.add_task(OWNER, "early bird")

    clock.now = clock.now.replace(hour=23, minute=59)
    service.complete_task(OWNER, late.task_id)
    clock.advance(minutes=2)  # 00:01 the next day
    service.complete_task(OWNER, early.task_id)

    assert _texts(service.list_completed(OWNER)) == ["late night", "early bird"]
    assert _texts(service.list_completed_today(OWNER)) == ["early bird"]

    clock.advance(days=1)
    assert service.list_completed_today(OWNER) == []


def test_reorder_accepts_id_strings(service):
    a = service.add_task(OWNER, "A")
    b = service.add_task(OWNER, "B")

    service.reorder(OWNER, [str(b.task_id), str(a.task_id)])

    assert _texts(service.list_pending(OWNER)) == ["B", "A"]


@pytest.mark.parametrize("payload", [None, "abc", {"ids": []}, [1, 2], ["not-a-uuid"]])
def test_reorder_rejects_malformed_payload(service, payload):
    service.add_task(OWNER, "A")

    with pytest.raises(ValidationError):
        service.reorder(OWNER, payload)


def test_reorder_rejects_other_owners_task(service):
    a = service.add_task(OWNER, "A")
    b = service.add_task(OWNER, "B")
    x = service.add_task(OTHER, "X")

    with pytest.raises(ValidationError):
        service.reorder(OWNER, [str(b.task_id), str(x.task_id), str(a.task_id)])

    assert _texts(service.list_pending(OWNER)) == ["A", "B"]


def test_lifecycle_scenario(service):
    # create A, B, C
    a = service.add_task(OWNER, "A")
    b = service.add_task(OWNER, "B")
    c = service.add_task(OWNER, "C")
    assert [(t.text, t.position) for t in service.list_pending(OWNER)] == [
        ("A", 0), ("B", 1), ("C", 2),
    ]

    # skip once
    service.skip(OWNER)
    assert [(t.text, t.position) for t in service.list_pending(OWNER)] == [
        ("B", 0), ("C", 1), ("A", 2),
    ]

    # complete B
    service.complete_task(OWNER, b.task_id)
    assert _texts(service.list_pending(OWNER)) == ["C", "A"]
    assert _texts(service.list_completed(OWNER)) == ["B"]

    # archive completed
    assert service.archive_completed(OWNER) == 1
    assert service.list_completed(OWNER) == []
    assert _texts(service.list_archived(OWNER)) == ["B"]

    # restore B
    restored = service.restore(OWNER, b.task_id)
    assert restored.completed_at is None and restored.archived_at is None
    assert "B" in _texts(service.list_pending(OWNER))

    # permanent delete of a pending task
    with pytest.raises(NotFoundError):
        service.permanent_delete(OWNER, c.task_id)

    assert {t.task_id for t in service.list_pending(OWNER)} == {a.task_id, b.task_id, c.task_id}


def test_bin_cleanup(service):
    a = service.add_task(OWNER, "A")
    b = service.add_task(OWNER, "B")
    service.complete_task(OWNER, a.task_id)
    service.complete_task(OWNER, b.task_id)
    service.archive_completed(OWNER)

    service.permanent_delete(OWNER, a.task_id)
    assert _texts(service.list_archived(OWNER)) == ["B"]

    assert service.empty_bin(OWNER) == 1
    assert service.list_archived(OWNER) == []

    with pytest.raises(NotFoundError):
        service.restore(OWNER, b.task_id)
    with pytest.raises(NotFoundError):
        service.permanent_delete(OWNER, uuid.uuid4())


def test_completed_today_ignores_clock_zone(service, clock):
    task = service.add_task(OWNER, "A")
    clock.now = datetime(2026, 10, 17, 23, 0, tzinfo=timezone.utc)
    service.complete_task(OWNER, task.task_id)

    # 01:00 the next day in UTC+2 is still the 17th in UTC
    clock.now = datetime(2026, 10, 18, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    assert _texts(service.list_completed_today(OWNER)) == ["A"]
