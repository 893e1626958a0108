"""Domain errors shared by the task store, the sync layer and the routers.

Each error carries the HTTP status it maps to; ``register_error_handlers``
turns them into ``{"detail": ...}`` JSON responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TaskAppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthorized(TaskAppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class NotFound(TaskAppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Task not found"


class ValidationError(TaskAppError):
    status_code = 422
    default_detail = "Invalid data"


class SyncConflict(TaskAppError):
    """Link on an already linked task, or refresh on an unlinked one."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Task sync state does not allow this action"


class AdapterUnavailable(TaskAppError):
    """Google Tasks could not be reached (network, auth, timeout, API error).

    Recoverable: the local task is left as it was and the user may retry.
    """
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Google Tasks is unavailable"


async def _handle_task_app_error(request: Request, exc: TaskAppError):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskAppError, _handle_task_app_error)
