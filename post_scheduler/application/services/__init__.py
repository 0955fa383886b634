from .schedule_coordinator import ScheduleCoordinator
from .webhook_executor import WebhookExecutor

__all__ = ["ScheduleCoordinator", "WebhookExecutor"]
