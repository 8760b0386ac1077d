"""Airtable record store - one row per failed payment."""

from datetime import datetime, timezone
from urllib.parse import quote

import httpx

from app.errors import RecordStoreError, parse_airtable_error
from app.models import FailedPayment

from .base import RecordStoreChannel

AIRTABLE_API = "https://api.airtable.com/v0"
_TIMEOUT = 30.0

NEW_STATUS = "New"


def build_fields(record: FailedPayment) -> dict:
    """Airtable column values for one record."""
    return {
        "Payment ID": record.payment_id,
        "Customer Email": record.customer_email,
        "Amount": record.amount_major,
        "Currency": record.currency_display,
        "Failure Code": record.failure_code or "Unknown",
        "Failure Message": record.failure_message or "Unknown",
        "Failed At": record.failed_at.isoformat(),
        "Status": NEW_STATUS,
        "Created At": datetime.now(timezone.utc).isoformat(),
    }


class AirtableStore(RecordStoreChannel):
    def __init__(
        self,
        api_key: str,
        base_id: str,
        table_name: str = "Failed Payments",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self.base_id = base_id
        self.table_name = table_name
        self._transport = transport

    @property
    def channel_name(self) -> str:
        return "Airtable"

    @property
    def table_url(self) -> str:
        return f"{AIRTABLE_API}/{self.base_id}/{quote(self.table_name, safe='')}"

    async def append(self, record: FailedPayment) -> str:
        if not self._api_key or not self.base_id:
            raise RecordStoreError("Airtable credentials not configured")

        payload = {"records": [{"fields": build_fields(record)}]}

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT, transport=self._transport) as client:
                response = await client.post(
                    self.table_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.HTTPError as e:
            raise RecordStoreError(f"Airtable request failed: {e}") from e

        if not response.is_success:
            raise RecordStoreError(f"Airtable API error: {parse_airtable_error(response.text)}")

        records = response.json().get("records", [])
        if not records:
            raise RecordStoreError("Airtable returned no created record")
        return records[0]["id"]
