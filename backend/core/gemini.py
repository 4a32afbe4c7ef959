import httpx
from typing import Optional, Dict, Any, List, Sequence

from models.image_operation import GenerationPrompt

# Sent with every generation call. These thresholds decide what the model refuses.
SAFETY_SETTINGS: List[Dict[str, str]] = [
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_ONLY_HIGH"},
]

IMAGE_RESPONSE_MODALITIES = ("TEXT", "IMAGE")
TEXT_RESPONSE_MODALITIES = ("TEXT",)


class GeminiAPIError(Exception):
    """Non-2xx answer from the Generative Language API, message kept as the provider sent it"""

    def __init__(self, status_code: int, message: str, status: Optional[str] = None):
        self.status_code = status_code
        self.status = status
        super().__init__(message)


class GeminiClient:
    """Client for the Google Generative Language API.

    Built once at startup and shared by every request; it holds no per-request
    state so concurrent operations don't interfere.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        image_model: str = "gemini-2.0-flash-preview-image-generation",
        text_model: str = "gemini-2.0-flash",
        timeout: Optional[float] = None,
        fetch_timeout: Optional[float] = None,
    ):
        self.api_key = api_key.strip() if api_key else None
        self.base_url = base_url.rstrip("/")
        self.image_model = image_model
        self.text_model = text_model
        self.timeout = timeout
        self.fetch_timeout = fetch_timeout

    @classmethod
    def from_settings(cls, settings) -> "GeminiClient":
        return cls(
            api_key=settings.GOOGLE_API_KEY,
            base_url=settings.GEMINI_API_BASE_URL,
            image_model=settings.GEMINI_IMAGE_MODEL,
            text_model=settings.GEMINI_TEXT_MODEL,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            fetch_timeout=settings.IMAGE_FETCH_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def validate_credentials(self, running_in_cloud: bool = False) -> bool:
        """Report the credential state at startup. Returns True when a key is present."""
        if not self.api_key:
            print("❌ GEMINI CONFIG ERROR: GOOGLE_API_KEY is NOT SET or is EMPTY. All AI features WILL FAIL.")
            if running_in_cloud:
                print("☁️ Running in a Google Cloud environment (Cloud Run / App Hosting).")
                print("⚠️ ACTION REQUIRED: set GOOGLE_API_KEY as a secret environment variable for this service.")
            else:
                print("⚠️ For local development, make sure your .env file sets GOOGLE_API_KEY.")
            return False

        masked = f"{self.api_key[:4]}...{self.api_key[-4:]}"
        print(f"✅ Gemini client initialized with GOOGLE_API_KEY {masked} (image model: {self.image_model})")
        return True

    def build_payload(self, prompt: GenerationPrompt, response_modalities: Sequence[str]) -> Dict[str, Any]:
        return {
            "contents": prompt.to_contents(),
            "generationConfig": {"responseModalities": list(response_modalities)},
            "safetySettings": [dict(setting) for setting in SAFETY_SETTINGS],
        }

    async def generate_content(
        self,
        prompt: GenerationPrompt,
        response_modalities: Sequence[str] = IMAGE_RESPONSE_MODALITIES,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send one generateContent request and return the decoded JSON response

        Args:
            prompt: Ordered prompt parts
            response_modalities: Modalities the model may answer with
            model: Model override, defaults to the configured image model

        Returns:
            Raw provider response

        Raises:
            GeminiAPIError: provider answered with a non-2xx status
            httpx.HTTPError: transport failure, propagated unmodified
        """
        model_name = model or self.image_model
        url = f"{self.base_url}/models/{model_name}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key or "",
            "Content-Type": "application/json"
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                url,
                json=self.build_payload(prompt, response_modalities),
                headers=headers
            )

        if not response.is_success:
            raise self._error_from_response(response)

        return response.json()

    @staticmethod
    def _error_from_response(response: httpx.Response) -> GeminiAPIError:
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            error_data = {}

        error = error_data.get("error", {}) if isinstance(error_data, dict) else {}
        message = error.get("message") if isinstance(error, dict) else None
        if not message:
            # Keep the raw body so HTML error pages still reach the classifier
            message = response.text[:300] or f"API request failed: {response.status_code}"

        status = error.get("status") if isinstance(error, dict) else None
        return GeminiAPIError(response.status_code, message, status)
