from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate, TaskResponse, TaskCountsResponse
from app.services import task_service, sync_service
from app.services.google_tasks import GoogleTasksAdapter

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_optional_tasks_adapter(
    x_google_token: Optional[str] = Header(None)
) -> Optional[GoogleTasksAdapter]:
    # Sans token Google, une tâche liée est supprimée localement seulement
    if not x_google_token:
        return None
    return GoogleTasksAdapter(x_google_token)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.create_task(
        db,
        current_user.id,
        title=task_data.title,
        priority=task_data.priority,
        due_date=task_data.due_date
    )


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    due: Optional[date] = Query(None)
):
    return task_service.list_tasks(db, current_user.id, due=due)


@router.get("/today", response_model=List[TaskResponse])
def today(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.get_today_tasks(db, current_user.id)


@router.get("/counts", response_model=TaskCountsResponse)
def counts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Pour le calendrier : {"2026-10-18": 2, ...}
    return {"counts": task_service.count_by_due_date(db, current_user.id)}


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.get_task(db, current_user.id, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    update_data = task_data.model_dump(exclude_unset=True)
    return task_service.update_task(db, current_user.id, task_id, update_data)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    adapter: Optional[GoogleTasksAdapter] = Depends(get_optional_tasks_adapter)
):
    warning = sync_service.delete_task(db, current_user.id, task_id, adapter)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    if warning:
        response.headers["X-Sync-Warning"] = warning
    return response
