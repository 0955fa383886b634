from .account_repository import AccountRepository
from .delivery_queue import DeliveryQueue
from .publishing_client import PublishingClient, PublishRequest, PublishResult
from .schedule_repository import ScheduleRepository
from .signature_verifier import SignatureVerifier

__all__ = [
    "AccountRepository",
    "DeliveryQueue",
    "PublishingClient",
    "PublishRequest",
    "PublishResult",
    "ScheduleRepository",
    "SignatureVerifier",
]
