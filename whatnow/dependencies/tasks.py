from fastapi import Depends
from sqlmodel import Session

from whatnow.db.session import get_session
from whatnow.services.task_list import TaskListService
from whatnow.services.task_store import TaskStore


def get_task_store(db: Session = Depends(get_session)) -> TaskStore:
    return TaskStore(db)


def get_task_service(store: TaskStore = Depends(get_task_store)) -> TaskListService:
    return TaskListService(store)
