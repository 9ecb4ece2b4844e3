from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from taskdesk.api.deps import Access, get_access
from taskdesk.core.errors import Forbidden
from taskdesk.db.session import get_db
from taskdesk.schemas.task import TaskCreate, TaskOut, TaskUpdate
from taskdesk.services import tasks as task_service

router = APIRouter()

# Fields an employee may change on a task assigned to them
EMPLOYEE_EDITABLE = {"status"}

@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_task(payload: TaskCreate, access: Access = Depends(get_access), db: Session = Depends(get_db)):
    access.require_admin()
    # creator comes from the verified token whenever there is one
    created_by = access.identity.id if access.identity else None
    return task_service.create_task(db, payload, created_by=created_by)

@router.get("", response_model=List[TaskOut])
@router.get("/", response_model=List[TaskOut], include_in_schema=False)
def list_tasks(
    assigned_to: Optional[int] = Query(None, alias="assignedTo", description="Only tasks assigned to this user id"),
    access: Access = Depends(get_access),
    db: Session = Depends(get_db),
):
    """All tasks for admins (and in open mode); employees only see their own."""
    if access.enforced and not access.is_admin:
        assigned_to = access.identity.id
    return task_service.list_tasks(db, assigned_to=assigned_to)

@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, access: Access = Depends(get_access), db: Session = Depends(get_db)):
    task = task_service.get_task(db, task_id)
    access.require_admin_or_assignee(task.assigned_to)
    return task

@router.put("/{task_id}", response_model=TaskOut)
def update_task(task_id: int, payload: TaskUpdate, access: Access = Depends(get_access), db: Session = Depends(get_db)):
    task = task_service.get_task(db, task_id)
    access.require_admin_or_assignee(task.assigned_to)
    if access.enforced and not access.is_admin:
        extra = payload.model_fields_set - EMPLOYEE_EDITABLE
        if extra:
            raise Forbidden("Employees can only change the task status")
    return task_service.update_task(db, task_id, payload)

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, access: Access = Depends(get_access), db: Session = Depends(get_db)):
    access.require_admin()
    task_service.delete_task(db, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
