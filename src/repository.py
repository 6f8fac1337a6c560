"""Task repository: the active and deleted lists, mirrored to storage.

Every mutation writes both lists before returning. The writes are two
independent key saves, so a crash between them can leave the lists out of
step on disk.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from models import Task
from storage import Storage, TASKS_KEY, DELETED_KEY

logger = logging.getLogger(__name__)


class TaskRepository:
    def __init__(self, storage: Storage):
        self.storage = storage
        self.active: List[Task] = []
        self.deleted: List[Task] = []
        self._next_id: int = 1
        self.load()

    # -------------------- loading / migration --------------------
    def load(self) -> None:
        raw_active = self.storage.load_list(TASKS_KEY)
        raw_deleted = self.storage.load_list(DELETED_KEY)
        self._next_id = 1
        known = [r.get('id') for r in list(raw_active) + list(raw_deleted)
                 if isinstance(r, Mapping) and isinstance(r.get('id'), int)]
        if known:
            self._next_id = max(known) + 1
        seen: set = set()
        self.active = self._load_records(raw_active, seen)
        self.deleted = self._load_records(raw_deleted, seen)
        logger.debug("loaded %d active, %d deleted tasks", len(self.active), len(self.deleted))

    def _load_records(self, records: Iterable[Any], seen: set) -> List[Task]:
        tasks: List[Task] = []
        for raw in records:
            if not isinstance(raw, Mapping):
                continue
            raw_text = raw.get('text')
            if raw_text is None:
                continue
            tid = raw.get('id')
            # legacy records have no id; duplicated ids are reassigned too
            if not isinstance(tid, int) or isinstance(tid, bool) or tid in seen:
                tid = self._allocate_id()
            seen.add(tid)
            tasks.append(Task(
                id=tid,
                text=str(raw_text),
                time=str(raw.get('time') or ''),
                completed=bool(raw.get('completed', False)),
            ))
        return tasks

    def _allocate_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def save(self) -> None:
        self.storage.save(TASKS_KEY, [t.to_dict() for t in self.active])
        self.storage.save(DELETED_KEY, [t.to_dict() for t in self.deleted])

    # -------------------- queries --------------------
    def find_active(self, task_id: int) -> Optional[Task]:
        for task in self.active:
            if task.id == task_id:
                return task
        return None

    def find_deleted(self, task_id: int) -> Optional[Task]:
        for task in self.deleted:
            if task.id == task_id:
                return task
        return None

    def counts(self) -> Dict[str, int]:
        done = sum(1 for t in self.active if t.completed)
        return {
            'active': len(self.active),
            'completed': done,
            'pending': len(self.active) - done,
            'deleted': len(self.deleted),
        }

    # -------------------- task operations --------------------
    def add(self, text: str, time: str = '') -> Optional[Task]:
        """Prepend a new pending task; blank text is ignored (returns None)."""
        text = text.strip()
        if not text:
            return None
        task = Task(id=self._allocate_id(), text=text, time=time or '', completed=False)
        self.active.insert(0, task)
        self.save()
        logger.debug("added task %d", task.id)
        return task

    def toggle_complete(self, task_id: int) -> Optional[Task]:
        task = self.find_active(task_id)
        if task is None:
            return None
        task.completed = not task.completed
        self.save()
        logger.debug("task %d completed=%s", task.id, task.completed)
        return task

    def commit_edit(self, task_id: int, text: str, time: str) -> Optional[Task]:
        """Overwrite text and time. An empty text after trim is accepted."""
        task = self.find_active(task_id)
        if task is None:
            return None
        task.text = text.strip()
        task.time = time or ''
        self.save()
        logger.debug("edited task %d", task.id)
        return task

    def soft_delete(self, task_id: int) -> Optional[Task]:
        task = self.find_active(task_id)
        if task is None:
            return None
        self.active.remove(task)
        self.deleted.append(task)
        self.save()
        logger.debug("soft-deleted task %d", task.id)
        return task

    def restore(self, task_id: int) -> Optional[Task]:
        """Move a task back to the END of the active list."""
        task = self.find_deleted(task_id)
        if task is None:
            return None
        self.deleted.remove(task)
        self.active.append(task)
        self.save()
        logger.debug("restored task %d", task.id)
        return task

    def permanently_delete(self, task_id: int) -> Optional[Task]:
        task = self.find_deleted(task_id)
        if task is None:
            return None
        self.deleted.remove(task)
        self.save()
        logger.debug("permanently deleted task %d", task.id)
        return task

    def delete_all(self) -> Tuple[int, int]:
        """Clear both lists. Returns the (active, deleted) counts removed."""
        removed = (len(self.active), len(self.deleted))
        self.active.clear()
        self.deleted.clear()
        self.save()
        logger.info("deleted all tasks (%d active, %d deleted)", *removed)
        return removed

    def __str__(self) -> str:
        c = self.counts()
        return (f'Active: {c["active"]} tasks ({c["completed"]} done), '
                f'Deleted: {c["deleted"]} tasks')
