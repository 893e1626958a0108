"""
TaskBoard - liste de tâches en mémoire avec mises à jour optimistes

Chaque intention (cocher, priorité, échéance, suppression) est appliquée
tout de suite à la liste locale, puis envoyée à l'API. En cas d'échec,
seuls les champs touchés reprennent leur valeur d'avant.

Une seule opération à la fois par tâche, mise à jour ou sync : une
deuxième intention sur une tâche déjà en cours est ignorée. Les
suppressions ne sont pas annulées en cas d'échec (pas de copie gardée),
il faut recharger la liste.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Set
import logging
import threading

from app.client.api_client import ApiError, TasksApiClient
from app.schemas.task import TaskResponse

logger = logging.getLogger(__name__)

FILTER_MODES = ("all", "today", "selected")


@dataclass
class BoardState:
    """État local de l'écran, passé explicitement au lieu de globales."""

    updating: Set[int] = field(default_factory=set)  # tâches avec un appel en cours
    syncing: Set[int] = field(default_factory=set)  # tâches avec un sync Google en cours
    creating: bool = False
    priority_menu: Optional[int] = None  # tâche dont le menu priorité est ouvert
    filter_mode: str = "all"
    selected_date: Optional[date] = None
    last_error: Optional[str] = None


class TaskBoard:
    def __init__(
        self,
        api: TasksApiClient,
        tasks: Optional[List[TaskResponse]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        self.api = api
        self.tasks: List[TaskResponse] = list(tasks or [])
        self.state = BoardState()
        self._on_error = on_error
        self._lock = threading.RLock()

    # ============ HELPERS ============

    def load(self) -> None:
        tasks = self.api.get_user_tasks()
        with self._lock:
            self.tasks = tasks

    def get(self, task_id: int) -> Optional[TaskResponse]:
        with self._lock:
            return next((t for t in self.tasks if t.id == task_id), None)

    def _patch(self, task_id: int, changes: dict) -> None:
        with self._lock:
            self.tasks = [
                t.model_copy(update=changes) if t.id == task_id else t
                for t in self.tasks
            ]

    def _begin(self, in_flight: Set[int], task_id: int) -> bool:
        with self._lock:
            # Une seule opération par tâche, update ou sync confondus
            if task_id in self.state.updating or task_id in self.state.syncing:
                logger.debug(f"Task {task_id} busy, intent ignored")
                return False
            in_flight.add(task_id)
            return True

    def _end(self, in_flight: Set[int], task_id: int) -> None:
        with self._lock:
            in_flight.discard(task_id)

    def _report(self, message: str) -> None:
        self.state.last_error = message
        logger.warning(message)
        if self._on_error:
            self._on_error(message)

    def _apply_optimistic(self, task_id: int, changes: dict, call: Callable[[], object], error: str) -> bool:
        """Applique ``changes`` tout de suite, lance ``call`` et annule ces champs si elle échoue."""
        task = self.get(task_id)
        if task is None or not self._begin(self.state.updating, task_id):
            return False

        try:
            before = {name: getattr(task, name) for name in changes}
            self._patch(task_id, changes)
            try:
                call()
            except ApiError as e:
                self._patch(task_id, before)
                self._report(f"{error}: {e}")
                return False
            return True
        finally:
            self._end(self.state.updating, task_id)

    # ============ INTENTIONS ============

    def add_task(self, title: str, due_date: Optional[date] = None) -> Optional[TaskResponse]:
        title = (title or "").strip()
        if not title:
            return None
        with self._lock:
            if self.state.creating:
                return None
            self.state.creating = True

        try:
            task = self.api.create_task(title, priority="medium", due_date=due_date)
        except ApiError as e:
            self._report(f"Failed to create task: {e}")
            return None
        finally:
            with self._lock:
                self.state.creating = False

        with self._lock:
            self.tasks = [task] + self.tasks
        return task

    def toggle_done(self, task_id: int) -> bool:
        task = self.get(task_id)
        if task is None:
            return False
        done = not task.done
        return self._apply_optimistic(
            task_id,
            {"done": done},
            lambda: self.api.update_task(task_id, {"done": done}),
            "Failed to update task"
        )

    def set_priority(self, task_id: int, priority: str) -> bool:
        self.state.priority_menu = None
        return self._apply_optimistic(
            task_id,
            {"priority": priority},
            lambda: self.api.update_task(task_id, {"priority": priority}),
            "Failed to update priority"
        )

    def set_due_date(self, task_id: int, due_date: Optional[date]) -> bool:
        return self._apply_optimistic(
            task_id,
            {"due_date": due_date},
            lambda: self.api.update_task(task_id, {"due_date": due_date}),
            "Failed to update due date"
        )

    def delete_task(self, task_id: int) -> bool:
        if self.get(task_id) is None or not self._begin(self.state.updating, task_id):
            return False

        try:
            with self._lock:
                self.tasks = [t for t in self.tasks if t.id != task_id]
            try:
                warning = self.api.delete_task(task_id)
            except ApiError as e:
                # Pas de retour arrière : la ligne reste retirée jusqu'au prochain load()
                self._report(f"Failed to delete task, please reload: {e}")
                return False
            if warning:
                self._report(f"Task deleted, Google copy kept: {warning}")
            return True
        finally:
            self._end(self.state.updating, task_id)

    def toggle_sync(self, task_id: int) -> bool:
        """Lie la tâche à Google Tasks si elle ne l'est pas, sinon la délie."""
        task = self.get(task_id)
        if task is None:
            return False
        if not self.api.google_token:
            self._report("Please connect to Google Tasks first")
            return False
        if not self._begin(self.state.syncing, task_id):
            return False

        try:
            if task.remote_id:
                result = self.api.sync_task(task_id, "unlink")
                self._patch(task_id, {"remote_id": None})
                if result.warning:
                    self._report(f"Removed from Google Tasks locally: {result.warning}")
            else:
                result = self.api.sync_task(task_id, "link")
                self._patch(task_id, {"remote_id": result.remote_id})
            return True
        except ApiError as e:
            self._report(f"Failed to sync with Google Tasks: {e}")
            return False
        finally:
            self._end(self.state.syncing, task_id)

    # ============ VUE ============

    def toggle_priority_menu(self, task_id: int) -> None:
        self.state.priority_menu = None if self.state.priority_menu == task_id else task_id

    def select_date(self, day: Optional[date]) -> None:
        self.state.selected_date = day
        self.state.filter_mode = "selected" if day else "all"

    def set_filter(self, mode: str) -> None:
        if mode not in FILTER_MODES:
            raise ValueError(f"Unknown filter mode: {mode}")
        self.state.filter_mode = mode

    def visible_tasks(self) -> List[TaskResponse]:
        with self._lock:
            tasks = list(self.tasks)
        if self.state.filter_mode == "today":
            return [t for t in tasks if t.due_date == date.today()]
        if self.state.filter_mode == "selected" and self.state.selected_date:
            return [t for t in tasks if t.due_date == self.state.selected_date]
        return tasks
