from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings


router = APIRouter(tags=["health"])

_startup_time = datetime.now(timezone.utc)


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float


class IntegrationStatus(BaseModel):
    connected: bool
    status: str
    last_check: str | None = None


class IntegrationsResponse(BaseModel):
    stripe: IntegrationStatus
    gmail: IntegrationStatus
    airtable: IntegrationStatus


def _ok() -> IntegrationStatus:
    return IntegrationStatus(
        connected=True,
        status="ok",
        last_check=datetime.now(timezone.utc).isoformat(),
    )


def _check_stripe() -> IntegrationStatus:
    if not settings.stripe_webhook_secret:
        return IntegrationStatus(connected=False, status="webhook secret not configured")
    if not settings.stripe_secret_key:
        return IntegrationStatus(connected=False, status="api key not configured")
    return _ok()


def _check_gmail() -> IntegrationStatus:
    has_creds = bool(settings.google_client_id and settings.google_client_secret)
    has_token = bool(settings.google_refresh_token)

    if not has_creds:
        return IntegrationStatus(connected=False, status="credentials not configured")
    if not has_token:
        return IntegrationStatus(connected=False, status="not authenticated (no refresh token)")
    return _ok()


def _check_airtable() -> IntegrationStatus:
    if not settings.airtable_api_key:
        return IntegrationStatus(connected=False, status="api key not configured")
    if not settings.airtable_base_id:
        return IntegrationStatus(connected=False, status="base id not configured")
    return _ok()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    now = datetime.now(timezone.utc)
    return HealthResponse(
        status="healthy",
        timestamp=now.isoformat(),
        uptime=round((now - _startup_time).total_seconds(), 2),
    )


@router.get("/health/integrations", response_model=IntegrationsResponse)
async def get_integrations():
    return IntegrationsResponse(
        stripe=_check_stripe(),
        gmail=_check_gmail(),
        airtable=_check_airtable(),
    )
