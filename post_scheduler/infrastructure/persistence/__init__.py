from .database import Database
from .models import Base, PublishingAccountModel, ScheduledPostModel

__all__ = ["Base", "Database", "PublishingAccountModel", "ScheduledPostModel"]
