"""
Shared pytest fixtures and configuration for all tests
"""
import base64
import pytest
import httpx
import sys
from pathlib import Path
from unittest.mock import AsyncMock

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")
OUTPUT_DATA_URI = "data:image/png;base64,b3V0cHV0LWltYWdl"


def media_response(data_uri: str = OUTPUT_DATA_URI) -> dict:
    """Build a generateContent response carrying one image part"""
    mime_type, data = data_uri[len("data:"):].split(";base64,", 1)
    return {
        "candidates": [{
            "content": {
                "role": "model",
                "parts": [
                    {"text": "Here is your image."},
                    {"inlineData": {"mimeType": mime_type, "data": data}}
                ]
            },
            "finishReason": "STOP"
        }]
    }


@pytest.fixture
def png_data_uri():
    return PNG_DATA_URI


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def output_data_uri():
    return OUTPUT_DATA_URI


@pytest.fixture
def make_media_response():
    return media_response


@pytest.fixture
def gemini_client():
    """Provide a GeminiClient whose network call is mocked"""
    from core.gemini import GeminiClient
    client = GeminiClient(api_key="test-key-1234567890")
    client.generate_content = AsyncMock(return_value=media_response())
    return client


@pytest.fixture
def image_operation_service(gemini_client):
    from services.image_operation_service import ImageOperationService
    return ImageOperationService(gemini_client)


@pytest.fixture
def mock_http(monkeypatch):
    """
    Route every httpx.AsyncClient through a MockTransport

    Usage: requests = mock_http(handler) where handler(request) -> httpx.Response.
    The returned list collects every request sent.
    """
    real_async_client = httpx.AsyncClient

    def install(handler):
        sent = []

        def recording_handler(request):
            sent.append(request)
            return handler(request)

        def client_factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(recording_handler)
            return real_async_client(*args, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", client_factory)
        return sent

    return install
