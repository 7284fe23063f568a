"""Client-side derivation of the visible task page.

``derive`` is a pure function of the task set and the view state: filter,
then stable sort, then paginate. ``TaskListView`` holds the mutable controls
a client exposes and re-derives on every change.
"""

import enum
import math
from dataclasses import dataclass, replace
from datetime import datetime
from functools import lru_cache
from typing import Iterable, Optional, Tuple

from ..config import LIST_VIEW_PAGE_SIZE
from ..enums import PriorityLevel, TaskStatus

ALL = "all"


class SortKey(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    PRIORITY_HIGH = "priority-high"
    PRIORITY_LOW = "priority-low"
    STATUS = "status"


_PRIORITY_HIGH_FIRST = {PriorityLevel.HIGH: 1, PriorityLevel.MEDIUM: 2, PriorityLevel.LOW: 3}
_PRIORITY_LOW_FIRST = {PriorityLevel.LOW: 1, PriorityLevel.MEDIUM: 2, PriorityLevel.HIGH: 3}
_STATUS_ORDER = {TaskStatus.DONE: 1, TaskStatus.IN_PROGRESS: 2, TaskStatus.PENDING: 3}


@dataclass(frozen=True)
class ClientTask:
    id: str
    name: str
    description: str
    status: TaskStatus
    priority_level: PriorityLevel
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_json(cls, data: dict) -> "ClientTask":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description") or "",
            status=TaskStatus(data["status"]),
            priority_level=PriorityLevel(data["priorityLevel"]),
            created_at=datetime.fromisoformat(data["createdAt"]),
            updated_at=datetime.fromisoformat(data["updatedAt"]),
        )


def _filter_value(value, enum_cls):
    return ALL if value in (None, ALL) else enum_cls(value)


@dataclass(frozen=True)
class ListViewState:
    status_filter: object = ALL
    priority_filter: object = ALL
    search_text: str = ""
    sort_key: SortKey = SortKey.NEWEST
    current_page: int = 1

    def __post_init__(self):
        # Normalise plain strings so equal states hash equally.
        object.__setattr__(self, "status_filter", _filter_value(self.status_filter, TaskStatus))
        object.__setattr__(self, "priority_filter", _filter_value(self.priority_filter, PriorityLevel))
        object.__setattr__(self, "sort_key", SortKey(self.sort_key))
        object.__setattr__(self, "search_text", self.search_text or "")
        object.__setattr__(self, "current_page", max(1, int(self.current_page)))


@dataclass(frozen=True)
class ListViewResult:
    page: Tuple[ClientTask, ...]
    total_pages: int
    current_page: int
    total: int = 0


def _matches(task: ClientTask, state: ListViewState, needle: str) -> bool:
    if state.status_filter != ALL and task.status != state.status_filter:
        return False
    if state.priority_filter != ALL and task.priority_level != state.priority_filter:
        return False
    if needle:
        return needle in task.name.lower() or needle in task.description.lower()
    return True


def _sorted(tasks, sort_key: SortKey):
    # sorted() is stable, so equal keys keep their input order.
    if sort_key is SortKey.NEWEST:
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)
    if sort_key is SortKey.OLDEST:
        return sorted(tasks, key=lambda t: t.created_at)
    if sort_key is SortKey.PRIORITY_HIGH:
        return sorted(tasks, key=lambda t: _PRIORITY_HIGH_FIRST[t.priority_level])
    if sort_key is SortKey.PRIORITY_LOW:
        return sorted(tasks, key=lambda t: _PRIORITY_LOW_FIRST[t.priority_level])
    return sorted(tasks, key=lambda t: _STATUS_ORDER[t.status])


@lru_cache(maxsize=128)
def _derive(tasks: Tuple[ClientTask, ...], state: ListViewState, page_size: int) -> ListViewResult:
    needle = state.search_text.lower()
    filtered = tuple(_sorted([t for t in tasks if _matches(t, state, needle)], state.sort_key))
    total_pages = math.ceil(len(filtered) / page_size)
    start = (state.current_page - 1) * page_size
    return ListViewResult(
        page=filtered[start:start + page_size],
        total_pages=total_pages,
        current_page=state.current_page,
        total=len(filtered),
    )


def derive(
    tasks: Iterable[ClientTask],
    state: ListViewState,
    page_size: int = LIST_VIEW_PAGE_SIZE,
) -> ListViewResult:
    """Visible page for ``state``; memoized on ``(tasks, state)``.

    ``newest``/``oldest`` order by ``created_at``; ``priority-high`` puts High
    first; ``priority-low`` puts Low first; ``status`` orders Done, In
    Progress, Pending. A sort with equal keys keeps the input order.
    """
    return _derive(tuple(tasks), state, page_size)


class TaskListView:
    """Mutable filter/sort/page controls over a task set.

    Changing the tasks, any filter, the search text or the sort key returns
    to page 1. Every change produces a fresh derivation.
    """

    def __init__(self, tasks: Iterable[ClientTask] = (), page_size: int = LIST_VIEW_PAGE_SIZE) -> None:
        self._tasks = tuple(tasks)
        self._state = ListViewState()
        self.page_size = page_size
        self.result = derive(self._tasks, self._state, page_size)

    @property
    def state(self) -> ListViewState:
        return self._state

    @property
    def tasks(self) -> Tuple[ClientTask, ...]:
        return self._tasks

    def _update(self, tasks: Optional[Tuple[ClientTask, ...]] = None, **changes) -> ListViewResult:
        if tasks is not None:
            self._tasks = tasks
        self._state = replace(self._state, **changes)
        self.result = derive(self._tasks, self._state, self.page_size)
        return self.result

    def set_tasks(self, tasks: Iterable[ClientTask]) -> ListViewResult:
        return self._update(tasks=tuple(tasks), current_page=1)

    def set_status_filter(self, value) -> ListViewResult:
        return self._update(status_filter=value, current_page=1)

    def set_priority_filter(self, value) -> ListViewResult:
        return self._update(priority_filter=value, current_page=1)

    def set_search_text(self, text: str) -> ListViewResult:
        return self._update(search_text=text, current_page=1)

    def set_sort_key(self, sort_key) -> ListViewResult:
        return self._update(sort_key=sort_key, current_page=1)

    def clear_filters(self) -> ListViewResult:
        return self._update(
            status_filter=ALL,
            priority_filter=ALL,
            search_text="",
            sort_key=SortKey.NEWEST,
            current_page=1,
        )

    def go_to_page(self, page: int) -> ListViewResult:
        last = max(1, self.result.total_pages)
        return self._update(current_page=min(max(1, int(page)), last))

    def next_page(self) -> ListViewResult:
        return self.go_to_page(self._state.current_page + 1)

    def previous_page(self) -> ListViewResult:
        return self.go_to_page(self._state.current_page - 1)
