"""Side-effect channel interfaces for failed-payment records."""

from abc import ABC, abstractmethod

from app.models import FailedPayment


class NotificationChannel(ABC):
    """Sends a human-readable alert about a failed payment."""

    @property
    @abstractmethod
    def channel_name(self) -> str:
        pass

    @abstractmethod
    async def send_alert(self, record: FailedPayment) -> None:
        """Deliver the alert. Raises NotificationError on failure."""
        pass


class RecordStoreChannel(ABC):
    """Appends one row per failed payment to an external table."""

    @property
    @abstractmethod
    def channel_name(self) -> str:
        pass

    @abstractmethod
    async def append(self, record: FailedPayment) -> str:
        """Store the record and return the store-assigned id. Raises RecordStoreError on failure."""
        pass
