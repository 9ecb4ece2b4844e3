import pytest

from taskdesk.core.errors import DuplicateEmail, Forbidden, InvalidCredentials, InvalidInput, NotFound, Unauthenticated
from taskdesk.models.task import Task
from taskdesk.models.user import User
from taskdesk.schemas.auth import UserRegister
from taskdesk.schemas.task import TaskCreate, TaskUpdate
from taskdesk.schemas.user import UserCreate, UserUpdate
from taskdesk.services import auth as auth_service
from taskdesk.services import tasks as task_service
from taskdesk.services import users as user_service


def _register(db, email="a@example.com", role=None):
    return auth_service.register(db, UserRegister(name="A", email=email, password="pw", role=role), allow_role=role is not None)


def test_register_twice_same_email(db):
    _register(db)
    with pytest.raises(DuplicateEmail):
        _register(db, email="A@Example.com")


def test_login_errors_are_indistinguishable(db):
    _register(db)
    with pytest.raises(InvalidCredentials) as wrong:
        auth_service.login(db, "a@example.com", "bad")
    with pytest.raises(InvalidCredentials) as unknown:
        auth_service.login(db, "nobody@example.com", "bad")
    assert wrong.value.detail == unknown.value.detail


def test_login_then_verify(db):
    user = _register(db, role="admin")
    result = auth_service.login(db, "a@example.com", "pw")
    identity = auth_service.verify(result.token)
    assert (identity.id, identity.role) == (user.id, "admin")


def test_verify_rejects_missing_token():
    with pytest.raises(Unauthenticated):
        auth_service.verify(None)
    with pytest.raises(Unauthenticated):
        auth_service.verify("a.b.c")


def test_list_employees_never_returns_admins(db):
    _register(db, "e1@example.com")
    _register(db, "boss@example.com", role="admin")
    user_service.create_user(db, UserCreate(name="Ops", email="ops@example.com", password="pw", role="admin"))
    employees = user_service.list_employees(db)
    assert [u.email for u in employees] == ["e1@example.com"]
    assert all(u.role == "employee" for u in employees)


def test_get_update_delete_missing_user(db):
    with pytest.raises(NotFound):
        user_service.get_user(db, 42)
    with pytest.raises(NotFound):
        user_service.update_user(db, 42, UserUpdate(name="x"))
    with pytest.raises(NotFound):
        user_service.delete_user(db, 42)


def test_create_task_empty_title(db):
    user = _register(db)
    with pytest.raises(InvalidInput):
        task_service.create_task(db, TaskCreate(title="", assigned_to=user.id))
    assert db.query(Task).count() == 0


def test_update_task_sets_completed_and_moves_updated_at(db):
    user = _register(db)
    task = task_service.create_task(db, TaskCreate(title="T", assigned_to=user.id), created_by=user.id)
    before = task.updated_at
    updated = task_service.update_task(db, task.id, TaskUpdate(status="completed"))
    assert updated.status == "completed"
    assert updated.updated_at > before


def test_update_task_rejects_blank_title(db):
    user = _register(db)
    task = task_service.create_task(db, TaskCreate(title="T", assigned_to=user.id))
    with pytest.raises(InvalidInput):
        task_service.update_task(db, task.id, TaskUpdate(title=" "))


def test_delete_missing_task(db):
    user = _register(db)
    task_service.create_task(db, TaskCreate(title="T", assigned_to=user.id))
    with pytest.raises(NotFound):
        task_service.delete_task(db, 999)
    assert db.query(Task).count() == 1


def test_list_tasks_unfiltered(db):
    a = _register(db, "a@example.com")
    b = _register(db, "b@example.com")
    task_service.create_task(db, TaskCreate(title="A", assigned_to=a.id))
    task_service.create_task(db, TaskCreate(title="B", assigned_to=b.id))
    assert {t.title for t in task_service.list_tasks(db)} == {"A", "B"}
    assert [t.title for t in task_service.list_tasks(db, assigned_to=b.id)] == ["B"]


def test_register_refuses_admin_role_unless_allowed(db):
    with pytest.raises(Forbidden):
        auth_service.register(db, UserRegister(name="A", email="a@example.com", password="pw", role="admin"))
    assert db.query(User).count() == 0
    user = auth_service.register(db, UserRegister(name="A", email="a@example.com", password="pw", role="employee"))
    assert user.role == "employee"
