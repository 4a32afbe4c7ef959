"""
Gemini client unit tests

The outbound generateContent request is captured with httpx.MockTransport.
"""
import json
import pytest
import httpx

from core.gemini import GeminiClient, GeminiAPIError, SAFETY_SETTINGS
from models.image_operation import OperationKind
from services.prompt_builder import build_prompt


@pytest.fixture
def client():
    return GeminiClient(api_key="AIza-test-key-9876", image_model="image-model", text_model="text-model")


@pytest.fixture
def prompt(png_data_uri):
    return build_prompt(OperationKind.SHARPEN, {}, png_data_uri)


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenerateContent:
    """Tests for the outbound request"""

    async def test_request_shape(self, client, prompt, mock_http, make_media_response):
        sent = mock_http(lambda request: httpx.Response(200, json=make_media_response()))

        response = await client.generate_content(prompt)

        assert response == make_media_response()
        assert len(sent) == 1
        request = sent[0]
        assert request.method == "POST"
        assert str(request.url) == (
            "https://generativelanguage.googleapis.com/v1beta/models/image-model:generateContent"
        )
        assert request.headers["x-goog-api-key"] == "AIza-test-key-9876"

        body = json.loads(request.content)
        assert body["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]
        assert body["contents"] == prompt.to_contents()

    async def test_safety_settings_are_fixed(self, client, prompt, mock_http, make_media_response):
        sent = mock_http(lambda request: httpx.Response(200, json=make_media_response()))

        await client.generate_content(prompt)

        body = json.loads(sent[0].content)
        thresholds = {s["category"]: s["threshold"] for s in body["safetySettings"]}
        assert thresholds == {
            "HARM_CATEGORY_HATE_SPEECH": "BLOCK_ONLY_HIGH",
            "HARM_CATEGORY_DANGEROUS_CONTENT": "BLOCK_NONE",
            "HARM_CATEGORY_HARASSMENT": "BLOCK_ONLY_HIGH",
            "HARM_CATEGORY_SEXUALLY_EXPLICIT": "BLOCK_ONLY_HIGH",
        }
        assert body["safetySettings"] == SAFETY_SETTINGS

    async def test_model_override(self, client, prompt, mock_http):
        sent = mock_http(lambda request: httpx.Response(200, json={"candidates": []}))

        await client.generate_content(prompt, ("TEXT",), model=client.text_model)

        assert sent[0].url.path.endswith("/models/text-model:generateContent")
        assert json.loads(sent[0].content)["generationConfig"]["responseModalities"] == ["TEXT"]

    async def test_provider_error_message_is_kept(self, client, prompt, mock_http):
        mock_http(lambda request: httpx.Response(400, json={
            "error": {
                "code": 400,
                "message": "API key not valid. Please pass a valid API key.",
                "status": "INVALID_ARGUMENT"
            }
        }))

        with pytest.raises(GeminiAPIError) as exc_info:
            await client.generate_content(prompt)

        assert exc_info.value.status_code == 400
        assert exc_info.value.status == "INVALID_ARGUMENT"
        assert str(exc_info.value) == "API key not valid. Please pass a valid API key."

    async def test_html_error_body_is_kept(self, client, prompt, mock_http):
        mock_http(lambda request: httpx.Response(502, text="<html><body>Bad Gateway"))

        with pytest.raises(GeminiAPIError) as exc_info:
            await client.generate_content(prompt)

        assert str(exc_info.value) == "<html><body>Bad Gateway"

    async def test_transport_error_propagates(self, client, prompt, mock_http):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        mock_http(handler)

        with pytest.raises(httpx.ConnectError):
            await client.generate_content(prompt)


@pytest.mark.unit
class TestCredentials:
    """Tests for startup credential validation"""

    def test_missing_key_is_reported(self, capsys):
        client = GeminiClient(api_key=None)

        assert client.validate_credentials() is False
        assert client.is_configured is False
        assert "GOOGLE_API_KEY is NOT SET" in capsys.readouterr().out

    def test_blank_key_counts_as_missing(self):
        assert GeminiClient(api_key="   ").is_configured is False

    def test_missing_key_in_cloud_mentions_secret(self, capsys):
        GeminiClient(api_key="").validate_credentials(running_in_cloud=True)
        assert "secret environment variable" in capsys.readouterr().out

    def test_present_key_is_masked(self, client, capsys):
        assert client.validate_credentials() is True

        out = capsys.readouterr().out
        assert "AIza...9876" in out
        assert "AIza-test-key-9876" not in out

    def test_from_settings(self):
        from config.settings import Settings
        settings = Settings(GOOGLE_API_KEY="abcd1234", GEMINI_IMAGE_MODEL="m", GENERATION_TIMEOUT_SECONDS=None)

        client = GeminiClient.from_settings(settings)

        assert client.api_key == "abcd1234"
        assert client.image_model == "m"
        assert client.timeout is None
