"""
Max-heap priority queue over pending tasks, ordered by `score`.

Array-backed binary heap: children of index i live at 2i+1 and 2i+2.
An id -> index map is kept in step with every swap so priority updates
locate their task in O(1).

Not internally synchronized: a long-lived instance shared between requests
must be confined to a single writer.
"""
from typing import Dict, List, Optional

from taskheap.domain.models.task import Task, TaskPriority
from taskheap.domain.services.scoring import score


class TaskPriorityQueue:
    def __init__(self, tasks: Optional[List[Task]] = None):
        self._heap: List[Task] = [t for t in (tasks or []) if t.is_pending()]
        self._index: Dict[str, int] = {t.id: i for i, t in enumerate(self._heap)}
        self._build()

    # ──── Public API ──────────────────────────────────────────────────────────
    def insert(self, task: Task) -> None:
        """Add a task. No validation: callers supply well-formed tasks."""
        self._heap.append(task)
        self._index[task.id] = len(self._heap) - 1
        self._swim(len(self._heap) - 1)

    def extract_max(self) -> Optional[Task]:
        if not self._heap:
            return None
        top = self._heap[0]
        last = self._heap.pop()
        del self._index[top.id]
        if self._heap:
            self._heap[0] = last
            self._index[last.id] = 0
            self._sink(0)
        return top

    def peek(self) -> Optional[Task]:
        return self._heap[0] if self._heap else None

    def update_priority(self, task_id: str, new_priority: TaskPriority) -> None:
        """Change a queued task's priority and restore heap order. Unknown ids are ignored."""
        i = self._index.get(task_id)
        if i is None:
            return
        task = self._heap[i]
        old_score = score(task)
        task.priority = new_priority
        if score(task) > old_score:
            self._swim(i)
        else:
            self._sink(i)

    def tasks(self) -> List[Task]:
        """Copy of the backing array. Only index 0 has a guaranteed position."""
        return list(self._heap)

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._index

    # ──── Private helpers ─────────────────────────────────────────────────────
    def _build(self) -> None:
        for i in range(len(self._heap) // 2 - 1, -1, -1):
            self._sink(i)

    def _swap(self, i: int, j: int) -> None:
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]
        self._index[heap[i].id] = i
        self._index[heap[j].id] = j

    def _sink(self, i: int) -> None:
        n = len(self._heap)
        while True:
            largest = i
            left, right = 2 * i + 1, 2 * i + 2
            if left < n and score(self._heap[left]) > score(self._heap[largest]):
                largest = left
            if right < n and score(self._heap[right]) > score(self._heap[largest]):
                largest = right
            if largest == i:
                return
            self._swap(i, largest)
            i = largest

    def _swim(self, i: int) -> None:
        while i > 0:
            parent = (i - 1) // 2
            if score(self._heap[i]) <= score(self._heap[parent]):
                return
            self._swap(i, parent)
            i = parent
