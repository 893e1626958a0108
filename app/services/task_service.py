"""Task service : accès à la table tasks, toujours filtré par propriétaire"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import date
from typing import Dict, List, Optional
import logging

from app.core.errors import NotFound, ValidationError
from app.models.task import Task, PRIORITIES
from app.schemas.task import clean_title

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"title", "done", "priority", "due_date", "remote_id"}


def _check_priority(priority: str) -> str:
    if priority not in PRIORITIES:
        raise ValidationError(f"Invalid priority: {priority}")
    return priority


def _check_title(title: Optional[str]) -> str:
    try:
        return clean_title(title or "")
    except ValueError as e:
        raise ValidationError(str(e))


def list_tasks(db: Session, user_id: int, due: Optional[date] = None) -> List[Task]:
    query = db.query(Task).filter(Task.user_id == user_id)
    if due is not None:
        query = query.filter(Task.due_date == due)
    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


def get_today_tasks(db: Session, user_id: int) -> List[Task]:
    return list_tasks(db, user_id, due=date.today())


def get_task(db: Session, user_id: int, task_id: int) -> Task:
    task = db.query(Task).filter(
        Task.id == task_id,
        Task.user_id == user_id
    ).first()

    if not task:
        raise NotFound("Task not found")

    return task


def create_task(
    db: Session,
    user_id: int,
    title: str,
    priority: Optional[str] = None,
    due_date: Optional[date] = None
) -> Task:
    # Validation avant toute écriture
    title = _check_title(title)
    priority = _check_priority(priority or "medium")

    task = Task(
        user_id=user_id,
        title=title,
        done=False,
        priority=priority,
        due_date=due_date
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.debug(f"Task {task.id} created for user {user_id}")
    return task


def update_task(db: Session, user_id: int, task_id: int, changes: dict) -> Task:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
    if "title" in changes:
        changes = {**changes, "title": _check_title(changes["title"])}
    if "priority" in changes:
        _check_priority(changes["priority"])
    if "done" in changes and changes["done"] is None:
        raise ValidationError("done must not be null")

    task = get_task(db, user_id, task_id)
    for field, value in changes.items():
        setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return task


def find_task(db: Session, user_id: int, task_id: int) -> Optional[Task]:
    """Tâche absente → None ; tâche d'un autre utilisateur → NotFound"""
    task = db.query(Task).filter(Task.id == task_id).first()
    if task is not None and task.user_id != user_id:
        raise NotFound("Task not found")
    return task


def delete_task(db: Session, user_id: int, task_id: int) -> bool:
    """Supprime la tâche ; retourne False si elle n'existait déjà plus."""
    task = find_task(db, user_id, task_id)
    if task is None:
        return False

    db.delete(task)
    db.commit()
    return True


def count_by_due_date(db: Session, user_id: int) -> Dict[str, int]:
    """Nombre de tâches par jour d'échéance, pour le calendrier"""
    rows = db.query(Task.due_date, func.count(Task.id)).filter(
        Task.user_id == user_id,
        Task.due_date.isnot(None)
    ).group_by(Task.due_date).all()

    return {due.isoformat(): count for due, count in rows}
