"""
Pytest configuration and shared fixtures.

This file provides common fixtures and configuration for all tests.

Decision: pytest-asyncio runs with asyncio_mode = "auto" (pyproject.toml),
so async tests and fixtures need no event loop plumbing.
"""

import base64
import io
import os

import pytest
from PIL import Image

# Set test environment variables before config.settings is imported
# Use .setdefault() to respect values already set by the environment
os.environ.setdefault("PROVIDER_API_KEY", "test-api-key")
os.environ.setdefault("PROVIDER_API_BASE", "https://provider.test")
os.environ.setdefault("PROVIDER_TEST_MODE", "true")
os.environ.setdefault("MAX_SENDS", "300")
os.environ.setdefault("DEFAULT_RECIPIENT_NAME", "Lucia Fernandez Ruiz")
os.environ.setdefault("DEFAULT_RECIPIENT_STREET", "Calle Mayor 12")
os.environ.setdefault("DEFAULT_RECIPIENT_CITY", "Madrid")
os.environ.setdefault("DEFAULT_RECIPIENT_POSTAL_CODE", "28013")
os.environ.setdefault("DEFAULT_RECIPIENT_COUNTRY", "ES")
os.environ.setdefault("LOG_LEVEL", "ERROR")


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A small real JPEG (a couple of KB)."""
    image = Image.new("RGB", (96, 64), (200, 120, 40))
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


@pytest.fixture
def front_image_b64(jpeg_bytes: bytes) -> str:
    return base64.b64encode(jpeg_bytes).decode("ascii")


@pytest.fixture
def recipient_override() -> dict[str, str]:
    return {
        "name": "Ana Maria Lopez",
        "street": "Avenida del Puerto 3",
        "city": "Valencia",
        "postalCode": "46021",
        "country": "es",
    }
