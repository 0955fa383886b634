from .publishing_account import PublishingAccount
from .scheduled_post import ScheduleRecord

__all__ = ["PublishingAccount", "ScheduleRecord"]
