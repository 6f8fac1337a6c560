"""Data models for the terminal task list.

Tasks carry a stable integer id so that filtering, sorting and moves
between the active and deleted lists never change which task a command
refers to. Records stored by the browser build have no id; they are given
one when loaded.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Tuple

FILTER_ALL = 'all'
FILTER_COMPLETED = 'completed'
FILTER_PENDING = 'pending'
FILTER_DELETED = 'deleted'
FILTERS: Tuple[str, ...] = (FILTER_ALL, FILTER_COMPLETED, FILTER_PENDING, FILTER_DELETED)


@dataclass
class Task:
    """A single task.

    Fields:
        id: Stable identifier, unique across the active and deleted lists.
        text: Task text (trimmed; non-empty when created via add).
        time: Local datetime "YYYY-MM-DDTHH:MM" or "" when unset.
        completed: Whether the task has been checked off.
    """
    id: int
    text: str
    time: str = ""
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'text': self.text, 'time': self.time, 'completed': self.completed}

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.id}, text={self.text}, completed={self.completed})"


@dataclass
class EditCursor:
    """The single row in edit: its task id and the not-yet-committed values."""
    task_id: int
    draft_text: str
    draft_time: str = ""
