from .inbound import ExecuteScheduledPostUseCase, ExecutionOutcome, ManageScheduledPostsUseCase
from .outbound import (
    AccountRepository,
    DeliveryQueue,
    PublishingClient,
    PublishRequest,
    PublishResult,
    ScheduleRepository,
    SignatureVerifier,
)

__all__ = [
    "AccountRepository",
    "DeliveryQueue",
    "ExecuteScheduledPostUseCase",
    "ExecutionOutcome",
    "ManageScheduledPostsUseCase",
    "PublishingClient",
    "PublishRequest",
    "PublishResult",
    "ScheduleRepository",
    "SignatureVerifier",
]
