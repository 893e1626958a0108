"""
Adapter Google Tasks - un seul fichier parle à l'API distante

Chaque tâche locale synchronisée a au plus une tâche Google dans la liste
par défaut. Le mapping local → distant est fait par ``build_mirror`` :

    title     → title (tel quel)
    done      → status "completed" / "needsAction"
    due_date  → due "YYYY-MM-DDT00:00:00.000Z" (minuit UTC), absent → effacé
    priority  → notes "Priority: High|Medium|Low" (Google n'a pas de priorité)

Le token d'accès Google est fourni par l'appelant à chaque requête ;
l'adapter n'en garde aucun entre deux requêtes HTTP de l'app.
Toute erreur réseau, d'auth, HTTP ou timeout remonte en AdapterUnavailable.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional
import logging

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.core.config import settings
from app.core.errors import AdapterUnavailable

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_NEEDS_ACTION = "needsAction"

# Statuts HTTP qui veulent dire "la tâche distante n'existe déjà plus"
GONE_STATUSES = (404, 410)


@dataclass
class RemoteTaskMirror:
    """Champs d'une tâche Google dérivés d'une tâche locale."""

    title: Optional[str] = None
    status: Optional[str] = None
    due: Optional[str] = None  # RFC 3339 ; None = pas d'échéance
    notes: Optional[str] = None

    def insert_body(self) -> dict:
        return {k: v for k, v in self._fields().items() if v is not None}

    def patch_body(self) -> dict:
        body = {k: v for k, v in self._fields().items() if v is not None}
        # Un null explicite efface l'échéance côté Google
        body["due"] = self.due
        if self.status == STATUS_NEEDS_ACTION:
            body["completed"] = None
        return body

    def _fields(self) -> dict:
        return {"title": self.title, "status": self.status, "due": self.due, "notes": self.notes}


def format_due(due_date: Optional[date]) -> Optional[str]:
    if due_date is None:
        return None
    return f"{due_date.isoformat()}T00:00:00.000Z"


def priority_note(priority: Optional[str]) -> str:
    return f"Priority: {(priority or 'medium').capitalize()}"


def build_mirror(task: Any) -> RemoteTaskMirror:
    """Traduit une tâche locale (title, done, priority, due_date) en miroir Google."""
    return RemoteTaskMirror(
        title=task.title,
        status=STATUS_COMPLETED if task.done else STATUS_NEEDS_ACTION,
        due=format_due(task.due_date),
        notes=priority_note(task.priority),
    )


class GoogleTasksAdapter:
    """Create/update/delete d'une tâche Google par tâche locale.

    Usage:
        adapter = GoogleTasksAdapter(access_token)
        remote_id = adapter.create_remote(build_mirror(task))
        adapter.update_remote(remote_id, build_mirror(task))
        adapter.delete_remote(remote_id)
    """

    def __init__(
        self,
        access_token: str,
        tasklist_id: Optional[str] = None,
        timeout: Optional[float] = None,
        service: Any = None,
    ) -> None:
        self._access_token = access_token
        self.tasklist_id = tasklist_id or settings.GOOGLE_TASKLIST_ID
        self.timeout = timeout if timeout is not None else settings.GOOGLE_TASKS_TIMEOUT
        self._service = service

    def _get_service(self) -> Any:
        if self._service is None:
            creds = Credentials(token=self._access_token)
            # Timeout borné sur le transport : un Google lent = AdapterUnavailable
            http = AuthorizedHttp(creds, http=httplib2.Http(timeout=self.timeout))
            self._service = build("tasks", "v1", http=http, cache_discovery=False)
        return self._service

    def _execute(self, action: str, make_request):
        try:
            return make_request(self._get_service().tasks()).execute()
        except HttpError as e:
            raise AdapterUnavailable(f"Google Tasks {action} failed (HTTP {e.resp.status})") from e
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            # OSError couvre les timeouts socket et les erreurs de connexion
            raise AdapterUnavailable(f"Google Tasks {action} failed: {e}") from e

    def create_remote(self, mirror: RemoteTaskMirror) -> str:
        result = self._execute(
            "create",
            lambda tasks: tasks.insert(tasklist=self.tasklist_id, body=mirror.insert_body()),
        )
        remote_id = (result or {}).get("id")
        if not remote_id:
            raise AdapterUnavailable("Google Tasks create returned no task id")
        return remote_id

    def update_remote(self, remote_id: str, mirror: RemoteTaskMirror) -> None:
        self._execute(
            "update",
            lambda tasks: tasks.patch(tasklist=self.tasklist_id, task=remote_id, body=mirror.patch_body()),
        )

    def delete_remote(self, remote_id: str) -> None:
        try:
            self._execute(
                "delete",
                lambda tasks: tasks.delete(tasklist=self.tasklist_id, task=remote_id),
            )
        except AdapterUnavailable as e:
            cause = e.__cause__
            if isinstance(cause, HttpError) and cause.resp.status in GONE_STATUSES:
                logger.info(f"Google task {remote_id} already deleted")
                return
            raise
