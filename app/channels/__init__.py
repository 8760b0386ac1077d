"""
Failed-payment side channels

Gmail alerts and the Airtable record store.
"""

from .airtable import AirtableStore
from .base import NotificationChannel, RecordStoreChannel
from .gmail import GmailNotifier

__all__ = ["NotificationChannel", "RecordStoreChannel", "AirtableStore", "GmailNotifier"]
