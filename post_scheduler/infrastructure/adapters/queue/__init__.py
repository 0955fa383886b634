from .qstash_client import QStashDeliveryQueue
from .qstash_signature import QStashSignatureVerifier

__all__ = ["QStashDeliveryQueue", "QStashSignatureVerifier"]
