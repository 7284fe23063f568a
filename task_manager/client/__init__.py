from .api import TaskApiClient, TaskApiError, TaskListPage
from .list_view import ClientTask, ListViewResult, ListViewState, SortKey, TaskListView, derive

__all__ = [
    "ClientTask",
    "ListViewResult",
    "ListViewState",
    "SortKey",
    "TaskApiClient",
    "TaskApiError",
    "TaskListPage",
    "TaskListView",
    "derive",
]
