"""
Client HTTP de l'API tâches (requests), utilisé par le TaskBoard

Toute réponse non 2xx ou erreur réseau devient une ApiError.
"""

from datetime import date
from typing import Dict, List, Optional
import logging

import requests

from app.schemas.sync import SyncResponse
from app.schemas.task import TaskResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    def __init__(self, message: str, status: int = 0):
        self.message = message
        self.status = status
        super().__init__(message)


def _to_json(changes: dict) -> dict:
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in changes.items()}


class TasksApiClient:
    """Appels /tasks et /google-tasks/sync pour un utilisateur connecté.

    ``session`` peut être une requests.Session ou tout objet avec la même
    méthode ``request`` (ex: le TestClient FastAPI).
    """

    def __init__(
        self,
        base_url: str = "",
        token: Optional[str] = None,
        google_token: Optional[str] = None,
        session=None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.google_token = google_token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.google_token:
            headers["X-Google-Token"] = self.google_token
        return headers

    def _request(self, method: str, path: str, **kwargs):
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            raise ApiError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = None
            raise ApiError(str(detail or "Request failed"), response.status_code)
        return response

    def get_user_tasks(self, due: Optional[date] = None) -> List[TaskResponse]:
        params = {"due": due.isoformat()} if due else None
        response = self._request("GET", "/tasks", params=params)
        return [TaskResponse.model_validate(item) for item in response.json()]

    def create_task(self, title: str, priority: str = "medium", due_date: Optional[date] = None) -> TaskResponse:
        payload = _to_json({"title": title, "priority": priority, "due_date": due_date})
        response = self._request("POST", "/tasks", json=payload)
        return TaskResponse.model_validate(response.json())

    def update_task(self, task_id: int, changes: dict) -> TaskResponse:
        response = self._request("PUT", f"/tasks/{task_id}", json=_to_json(changes))
        return TaskResponse.model_validate(response.json())

    def delete_task(self, task_id: int) -> Optional[str]:
        """Retourne l'avertissement de sync éventuel (copie Google non supprimée)."""
        response = self._request("DELETE", f"/tasks/{task_id}")
        return response.headers.get("X-Sync-Warning")

    def get_task_counts(self) -> Dict[str, int]:
        return self._request("GET", "/tasks/counts").json()["counts"]

    def sync_task(self, task_id: int, action: str) -> SyncResponse:
        response = self._request("POST", "/google-tasks/sync", json={"task_id": task_id, "action": action})
        return SyncResponse.model_validate(response.json())
