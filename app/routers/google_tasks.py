from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session
from typing import Optional

from app.core.database import get_db
from app.core.errors import Unauthorized
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.sync import SyncRequest, SyncResponse
from app.services import sync_service
from app.services.google_tasks import GoogleTasksAdapter

router = APIRouter(prefix="/google-tasks", tags=["google-tasks"])

SYNC_ACTIONS = {
    "link": sync_service.link,
    "refresh": sync_service.refresh,
    "unlink": sync_service.unlink,
}


def get_tasks_adapter(
    x_google_token: Optional[str] = Header(None)
) -> GoogleTasksAdapter:
    # Token Google fourni à chaque requête, jamais stocké côté serveur
    if not x_google_token:
        raise Unauthorized("Google authentication required")
    return GoogleTasksAdapter(x_google_token)


@router.post("/sync", response_model=SyncResponse)
def sync_task(
    request: SyncRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    adapter: GoogleTasksAdapter = Depends(get_tasks_adapter)
):
    """Lie, rafraîchit ou délie une tâche avec Google Tasks.

    - link : crée la tâche Google (409 si déjà liée)
    - refresh : pousse l'état local (409 si pas liée)
    - unlink : supprime la tâche Google ; le lien local est effacé même si Google échoue
    """
    action = SYNC_ACTIONS[request.action]
    return action(db, current_user.id, request.task_id, adapter)
