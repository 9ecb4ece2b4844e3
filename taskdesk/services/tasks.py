import logging
from datetime import timedelta
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskdesk.core.errors import InvalidInput, NotFound
from taskdesk.models.base import utcnow
from taskdesk.models.task import STATUS_PENDING, STATUSES, Task
from taskdesk.models.user import User
from taskdesk.schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


def _check_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise InvalidInput("title is required")
    return title.strip()


def _check_status(status: str | None) -> str:
    if status not in STATUSES:
        raise InvalidInput(f"status must be one of: {', '.join(STATUSES)}")
    return status


def _check_assignee(db: Session, user_id: int | None) -> int:
    if user_id is None:
        raise InvalidInput("assignedTo is required")
    if db.get(User, user_id) is None:
        raise InvalidInput("Assigned user not found")
    return user_id


def _touch(task: Task) -> None:
    # updatedAt must move forward on every mutation, even within one clock tick
    now = utcnow()
    if task.updated_at is not None and now <= task.updated_at:
        now = task.updated_at + timedelta(microseconds=1)
    task.updated_at = now


def create_task(db: Session, data: TaskCreate, created_by: int | None = None) -> Task:
    """Persist a new task. ``created_by`` overrides any value carried in ``data``."""
    title = _check_title(data.title)
    status = _check_status(data.status or STATUS_PENDING)
    assigned_to = _check_assignee(db, data.assigned_to)
    now = utcnow()
    task = Task(
        title=title,
        description=data.description,
        assigned_to=assigned_to,
        status=status,
        created_by=created_by if created_by is not None else data.created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Created task id=%s assigned_to=%s created_by=%s", task.id, task.assigned_to, task.created_by)
    return task


def list_tasks(db: Session, assigned_to: int | None = None) -> Sequence[Task]:
    q = select(Task).order_by(Task.created_at.desc(), Task.id.desc())
    if assigned_to is not None:
        q = q.where(Task.assigned_to == assigned_to)
    return db.scalars(q).all()


def get_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise NotFound("Task not found")
    return task


def update_task(db: Session, task_id: int, data: TaskUpdate) -> Task:
    """Merge the supplied fields into the stored task."""
    task = get_task(db, task_id)
    changes: dict[str, Any] = data.model_dump(exclude_unset=True)

    if "title" in changes:
        task.title = _check_title(changes["title"])
    if "description" in changes:
        task.description = changes["description"]
    if "assigned_to" in changes:
        task.assigned_to = _check_assignee(db, changes["assigned_to"])
    if "status" in changes:
        task.status = _check_status(changes["status"])

    _touch(task)
    db.commit()
    db.refresh(task)
    logger.info("Updated task id=%s fields=%s", task.id, sorted(changes))
    return task


def delete_task(db: Session, task_id: int) -> None:
    task = get_task(db, task_id)
    db.delete(task)
    db.commit()
    logger.info("Deleted task id=%s", task_id)
