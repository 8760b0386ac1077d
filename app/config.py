"""Application configuration via pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    debug: bool = False
    port: int = 3000
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:3001"]
    rate_limit_enabled: bool = True
    manual_test_rate_limit: str = "10/minute"

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # Google OAuth (Gmail alerts)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "https://developers.google.com/oauthplayground"
    google_refresh_token: str = ""

    # Airtable
    airtable_api_key: str = ""
    airtable_base_id: str = ""
    airtable_table_name: str = "Failed Payments"

    # Alerts
    alert_email: str = "admin@example.com"


settings = Settings()
