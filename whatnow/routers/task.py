# whatnow/routers/task.py
from contextlib import contextmanager
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from whatnow.dependencies.billing import require_paid_access
from whatnow.dependencies.tasks import get_task_service
from whatnow.models.task import Task
from whatnow.schemas.task import (
    ArchiveResponse,
    CompleteCurrentResponse,
    EmptyBinResponse,
    ReorderRequest,
    SuccessResponse,
    TaskCreate,
    TaskRead,
)
from whatnow.services.errors import NotFoundError, StoreError, ValidationError
from whatnow.services.task_list import TaskListService

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


@contextmanager
def _task_errors():
    try:
        yield
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")
    except StoreError:
        raise HTTPException(status_code=500, detail="Task store failure")


def _serialize(task: Task) -> TaskRead:
    return TaskRead.model_validate(task, from_attributes=True)


def _serialize_tasks(rows: list[Task]) -> list[TaskRead]:
    return [_serialize(row) for row in rows]


@router.get("", response_model=list[TaskRead])
def list_pending_tasks(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        return _serialize_tasks(service.list_pending(owner_id))


@router.get("/current", response_model=TaskRead | None)
def get_current_task(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        task = service.current_task(owner_id)
        return _serialize(task) if task else None


@router.get("/completed", response_model=list[TaskRead])
def list_completed_tasks(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        return _serialize_tasks(service.list_completed(owner_id))


@router.get("/completed/today", response_model=list[TaskRead])
def list_completed_today(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        return _serialize_tasks(service.list_completed_today(owner_id))


@router.get("/bin", response_model=list[TaskRead])
def list_archived_tasks(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        return _serialize_tasks(service.list_archived(owner_id))


@router.post("", response_model=TaskRead)
def create_task(
    payload: TaskCreate,
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        return _serialize(service.add_task(owner_id, payload.text))


@router.post("/current/complete", response_model=CompleteCurrentResponse)
def complete_current_task(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    """Done button: finish the task on screen and hand back the next one."""
    with _task_errors():
        done, upcoming = service.complete_current(owner_id)
        return CompleteCurrentResponse(
            completed=_serialize(done),
            current=_serialize(upcoming) if upcoming else None,
        )


@router.patch("/{task_id}/complete", response_model=TaskRead)
def complete_task(
    task_id: UUID,
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        return _serialize(service.complete_task(owner_id, task_id))


@router.post("/skip", response_model=list[TaskRead])
def skip_current_task(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        return _serialize_tasks(service.skip(owner_id))


@router.post("/reorder", response_model=SuccessResponse)
def reorder_tasks(
    payload: ReorderRequest,
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        service.reorder(owner_id, payload.task_ids)
    return SuccessResponse()


@router.post("/archive", response_model=ArchiveResponse)
def archive_completed_tasks(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        archived = service.archive_completed(owner_id)
    return ArchiveResponse(archived=archived)


@router.patch("/{task_id}/restore", response_model=TaskRead)
def restore_task(
    task_id: UUID,
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        return _serialize(service.restore(owner_id, task_id))


@router.delete("/bin", response_model=EmptyBinResponse)
def empty_bin(
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        deleted = service.empty_bin(owner_id)
    return EmptyBinResponse(deleted=deleted)


@router.delete("/{task_id}/permanent", response_model=SuccessResponse)
def permanently_delete_task(
    task_id: UUID,
    owner_id: str = Depends(require_paid_access),
    service: TaskListService = Depends(get_task_service),
):
    with _task_errors():
        service.permanent_delete(owner_id, task_id)
    return SuccessResponse()
