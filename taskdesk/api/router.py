from fastapi import APIRouter

from taskdesk.api.routes import health, tasks, users

api_router = APIRouter()
api_router.include_router(users.router, prefix="/users", tags=["users"])  # register, login, me, employees, CRUD
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])  # CRUD
