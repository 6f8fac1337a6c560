"""Interaction controller: application state plus the command handlers.

Handlers take row numbers as displayed (1-based, after filter and sort),
resolve them to task ids through the current view, mutate the repository
or theme registry, and return a short message ('' on silent success).

Edit state machine:
    Idle --edit(n)--> Editing(n)          draft starts from the task
    Editing(n) --edit(n)--> Idle          draft is committed
    Editing(a) --edit(b)--> Editing(b)    a's draft is discarded unsaved
"""
from dataclasses import dataclass
from typing import Callable, Optional
import logging

from models import EditCursor, FILTERS, FILTER_ALL, FILTER_DELETED
from repository import TaskRepository
from theme import ThemeRegistry, UnknownThemeError, theme_names
from view import View, project

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    filter: str = FILTER_ALL
    descending: bool = False
    edit: Optional[EditCursor] = None

    @classmethod
    def initial(cls) -> 'AppState':
        return cls()


class Controller:
    def __init__(self, repo: TaskRepository, themes: ThemeRegistry,
                 state: Optional[AppState] = None):
        self.repo = repo
        self.themes = themes
        self.state = state or AppState.initial()

    def reset(self) -> None:
        self.state = AppState.initial()

    # -------------------- projection --------------------
    def view(self) -> View:
        self._drop_stale_edit()
        return project(self.repo.active, self.repo.deleted, self.state.filter,
                       self.state.descending, self.state.edit)

    def _drop_stale_edit(self) -> None:
        edit = self.state.edit
        if edit is None:
            return
        visible = project(self.repo.active, self.repo.deleted, self.state.filter,
                          self.state.descending)
        task = self.repo.find_active(edit.task_id)
        if task is None or task.completed or visible.position_of(edit.task_id) is None:
            logger.debug("dropping edit cursor for task %d", edit.task_id)
            self.state.edit = None

    def _resolve(self, position: int):
        view = self.view()
        return view, view.task_id_at(position)

    @property
    def editing(self) -> bool:
        return self.state.edit is not None

    # -------------------- task actions --------------------
    def add_task(self, text: str, time: str = '') -> str:
        # blank text is ignored without a message
        self.repo.add(text, time)
        return ''

    def toggle_complete(self, position: int) -> str:
        view, task_id = self._resolve(position)
        if task_id is None:
            return f'No task #{position}.'
        if view.filter == FILTER_DELETED:
            return 'Deleted tasks cannot be completed; restore first.'
        if self.state.edit is not None and self.state.edit.task_id == task_id:
            self.state.edit = None
        self.repo.toggle_complete(task_id)
        return ''

    def edit_task(self, position: int) -> str:
        view, task_id = self._resolve(position)
        if task_id is None:
            return f'No task #{position}.'
        row = view.row_at(position)
        if not row.edit_enabled:
            return f'Task #{position} cannot be edited.'
        edit = self.state.edit
        if edit is not None and edit.task_id == task_id:
            self.repo.commit_edit(task_id, edit.draft_text, edit.draft_time)
            self.state.edit = None
            return ''
        if edit is not None:
            logger.debug("discarding unsaved edit of task %d", edit.task_id)
        task = self.repo.find_active(task_id)
        self.state.edit = EditCursor(task_id=task.id, draft_text=task.text, draft_time=task.time)
        return ''

    def update_draft(self, text: Optional[str] = None, time: Optional[str] = None) -> str:
        if self.state.edit is None:
            return 'Not editing; use edit <n> first.'
        if text is not None:
            self.state.edit.draft_text = text
        if time is not None:
            self.state.edit.draft_time = time
        return ''

    def soft_delete(self, position: int) -> str:
        view, task_id = self._resolve(position)
        if task_id is None or view.filter == FILTER_DELETED:
            return f'No task #{position}.'
        self.state.edit = None
        self.repo.soft_delete(task_id)
        return ''

    def restore(self, position: int) -> str:
        view, task_id = self._resolve(position)
        if view.filter != FILTER_DELETED:
            return 'Switch to the deleted filter to restore tasks.'
        if task_id is None:
            return f'No task #{position}.'
        self.state.edit = None
        self.repo.restore(task_id)
        return ''

    def permanently_delete(self, position: int) -> str:
        view, task_id = self._resolve(position)
        if view.filter != FILTER_DELETED:
            return 'Switch to the deleted filter to delete tasks permanently.'
        if task_id is None:
            return f'No task #{position}.'
        self.state.edit = None
        self.repo.permanently_delete(task_id)
        return ''

    def delete_all(self, confirm: Callable[[str], bool]) -> str:
        if not confirm('are you sure you want to delete all tasks and deleted tasks?'):
            return 'Nothing deleted.'
        self.state.edit = None
        active, deleted = self.repo.delete_all()
        return f'Deleted {active + deleted} tasks.'

    # -------------------- order / filter / theme --------------------
    def filter_tasks(self, filter_name: str) -> str:
        if filter_name not in FILTERS:
            return f'Invalid filter: {filter_name}'
        self.state.filter = filter_name
        self.state.edit = None
        return ''

    def set_order(self, order: str) -> str:
        if order not in ('asc', 'desc'):
            return f'Invalid order: {order}'
        self.state.descending = order == 'desc'
        return ''

    def select_theme(self, name: str) -> str:
        try:
            self.themes.set_theme(name)
        except UnknownThemeError:
            return f'Unknown theme: {name}. Choose one of: {", ".join(theme_names())}'
        return ''
