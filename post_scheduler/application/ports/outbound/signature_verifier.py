from abc import ABC, abstractmethod


class SignatureVerifier(ABC):
    """Output port for authenticating inbound queue callbacks."""

    @abstractmethod
    def verify(self, body: bytes, signature: str) -> None:
        """Raise ``SignatureInvalid`` unless ``signature`` signs ``body``."""
        ...
