"""
Service de synchronisation Google Tasks - link / refresh / unlink

La base locale fait foi : la tâche Google n'est qu'un miroir, rien n'est
jamais relu depuis Google. Chaque action est un appel explicite de
l'utilisateur, sans retry ni file d'attente.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.core.errors import AdapterUnavailable, SyncConflict
from app.services import task_service
from app.services.google_tasks import build_mirror

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    action: str
    success: bool
    remote_id: Optional[str] = None
    warning: Optional[str] = None


def link(db: Session, user_id: int, task_id: int, adapter) -> SyncResult:
    """Crée la tâche côté Google et mémorise son id.

    Si Google échoue, rien n'est écrit en local et AdapterUnavailable remonte.
    Si l'écriture locale échoue, la tâche Google tout juste créée est supprimée.
    """
    task = task_service.get_task(db, user_id, task_id)
    if task.remote_id:
        raise SyncConflict("Task is already synced")

    remote_id = adapter.create_remote(build_mirror(task))

    try:
        task_service.update_task(db, user_id, task_id, {"remote_id": remote_id})
    except Exception:
        # Lien non enregistré : on retire la copie Google pour ne pas la laisser orpheline
        db.rollback()
        try:
            adapter.delete_remote(remote_id)
        except AdapterUnavailable as e:
            logger.warning(f"Task {task_id}: Google task {remote_id} left orphaned ({e})")
        raise

    logger.info(f"Task {task_id} linked to Google task {remote_id}")
    return SyncResult(action="link", success=True, remote_id=remote_id)


def refresh(db: Session, user_id: int, task_id: int, adapter) -> SyncResult:
    """Pousse l'état local actuel vers la tâche Google liée (un seul appel)."""
    task = task_service.get_task(db, user_id, task_id)
    if not task.remote_id:
        raise SyncConflict("Task is not synced")

    try:
        adapter.update_remote(task.remote_id, build_mirror(task))
    except AdapterUnavailable:
        logger.warning(f"Task {task_id}: Google copy {task.remote_id} is stale")
        raise

    return SyncResult(action="refresh", success=True, remote_id=task.remote_id)


def unlink(db: Session, user_id: int, task_id: int, adapter) -> SyncResult:
    """Supprime la tâche Google et efface le lien local, même si Google échoue."""
    task = task_service.get_task(db, user_id, task_id)
    remote_id = task.remote_id
    if not remote_id:
        # Déjà non liée : rien à faire
        return SyncResult(action="unlink", success=True)

    warning = None
    try:
        adapter.delete_remote(remote_id)
    except AdapterUnavailable as e:
        # Le lien local est quand même effacé ; la tâche Google reste orpheline
        warning = str(e)
        logger.warning(f"Task {task_id}: Google task {remote_id} not deleted, left orphaned ({e})")

    task_service.update_task(db, user_id, task_id, {"remote_id": None})
    logger.info(f"Task {task_id} unlinked from Google task {remote_id}")
    return SyncResult(action="unlink", success=True, warning=warning)


def delete_task(db: Session, user_id: int, task_id: int, adapter=None) -> Optional[str]:
    """Supprime une tâche locale ; si elle est liée, tente aussi de supprimer la copie Google.

    La suppression locale n'est jamais bloquée par Google. Retourne un
    avertissement si la copie Google n'a pas pu être supprimée.
    """
    task = task_service.find_task(db, user_id, task_id)
    if task is None:
        return None

    warning = None
    if task.remote_id:
        if adapter is None:
            warning = "Google authentication required to delete the synced copy"
        else:
            try:
                adapter.delete_remote(task.remote_id)
            except AdapterUnavailable as e:
                warning = str(e)
        if warning:
            logger.warning(f"Task {task_id}: Google task {task.remote_id} left orphaned ({warning})")

    task_service.delete_task(db, user_id, task_id)
    return warning
