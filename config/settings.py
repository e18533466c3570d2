"""
Application configuration settings.

Centralized configuration using Pydantic Settings for type safety and validation.

Decision: Provider endpoint, body format and auth placement are settings
rather than code. The right combination depends on the provider deployment
(region host, API version) and has changed more than once.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "postcard-mailer-api"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    # Quota and input limits
    max_sends: int = 300
    max_image_bytes: int = 5 * 1024 * 1024
    max_message_length: int = 1000

    # Print-and-mail provider
    provider_api_key: str | None = None
    provider_api_base: str = "https://api-eu1.stannp.com"
    provider_api_path: str = "/v1/postcards/create"
    provider_body_format: Literal["multipart", "json"] = "multipart"
    provider_auth_placement: Literal["query", "header"] = "query"
    provider_test_mode: bool = True
    provider_timeout_seconds: float = 15.0
    postcard_size: Literal["A5", "A6"] = "A5"
    post_unverified: bool = True

    # Back side rendering
    back_strategy: Literal["markup", "document", "raster"] = "markup"
    back_title: str = "Greetings!"
    raster_font_path: str | None = None

    # Recipient
    # "request": recipientOverride wins, configured default otherwise
    # "default": always the configured default, overrides are rejected
    recipient_source: Literal["request", "default"] = "request"
    default_recipient_name: str | None = None
    default_recipient_street: str | None = None
    default_recipient_city: str | None = None
    default_recipient_postal_code: str | None = None
    default_recipient_country: str = "ES"

    # Client disconnect detection while the provider call is in flight
    disconnect_poll_seconds: float = 0.5


# Global settings instance
settings = Settings()
