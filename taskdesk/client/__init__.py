from taskdesk.client.api import ApiError, TaskDeskClient
from taskdesk.client.session import ClientSession

__all__ = ["ApiError", "ClientSession", "TaskDeskClient"]
