"""Service status and endpoint directory."""

from fastapi import APIRouter
from pydantic import BaseModel


router = APIRouter()

SERVICE_NAME = "Stripe Payment Monitor"

ENDPOINTS = {
    "GET /": "Status and available endpoints",
    "GET /health": "Health check",
    "GET /health/integrations": "Integration configuration status",
    "GET /logs": "View recent logs",
    "POST /test": "Manual test run",
    "POST /webhook/stripe": "Stripe webhook endpoint",
}


class StatusResponse(BaseModel):
    name: str
    status: str
    endpoints: dict[str, str]
    description: str


@router.get("/", response_model=StatusResponse)
async def service_status():
    return StatusResponse(
        name=SERVICE_NAME,
        status="running",
        endpoints=ENDPOINTS,
        description="Monitors Stripe for failed payments, sends Gmail alerts, and updates Airtable",
    )
