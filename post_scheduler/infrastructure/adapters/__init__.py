from .persistence import PostgresAccountRepository, PostgresScheduleRepository
from .publishing import TwitterPublisher
from .queue import QStashDeliveryQueue, QStashSignatureVerifier

__all__ = [
    "PostgresAccountRepository",
    "PostgresScheduleRepository",
    "QStashDeliveryQueue",
    "QStashSignatureVerifier",
    "TwitterPublisher",
]
