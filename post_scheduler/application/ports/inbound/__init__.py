from .execute_scheduled_post import ExecuteScheduledPostUseCase, ExecutionOutcome
from .manage_scheduled_posts import ManageScheduledPostsUseCase

__all__ = [
    "ExecuteScheduledPostUseCase",
    "ExecutionOutcome",
    "ManageScheduledPostsUseCase",
]
