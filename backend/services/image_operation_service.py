import json
import re
from typing import Tuple, Optional, List

from core.gemini import GeminiClient, IMAGE_RESPONSE_MODALITIES, TEXT_RESPONSE_MODALITIES
from models.image_operation import OperationKind, ImageOperationRequest, GenerationResult
from services.input_normalizer import normalize_image_input
from services.prompt_builder import build_prompt, build_suggestions_prompt, resolve_parameters
from services.result_extractor import extract_media_data_uri, extract_text
from services.error_classifier import ErrorClassifier, operation_label

BULLET_PREFIX = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


def parse_suggestions(text: str) -> List[str]:
    """Read a JSON array of strings, falling back to one suggestion per line"""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
        cleaned = cleaned.strip()

    try:
        data = json.loads(cleaned)
        if isinstance(data, list):
            return [str(item).strip() for item in data if str(item).strip()]
    except ValueError:
        pass

    lines = [BULLET_PREFIX.sub("", line).strip() for line in cleaned.splitlines()]
    return [line for line in lines if line]


class ImageOperationService:
    """Runs image operations against the injected Gemini client"""

    def __init__(self, gemini_client: GeminiClient, classifier: Optional[ErrorClassifier] = None):
        self.gemini_client = gemini_client
        self.classifier = classifier or ErrorClassifier()

    async def run_image_operation(self, kind: OperationKind, request: ImageOperationRequest) -> GenerationResult:
        """
        Normalize the input, build the prompt, call the model and extract the image

        Args:
            kind: Operation to run
            request: Inbound request with photoDataUri or imageUrl

        Returns:
            GenerationResult with the output data URI, or the classified failure
        """
        label = operation_label(kind)
        try:
            image = await normalize_image_input(request, fetch_timeout=self.gemini_client.fetch_timeout)
            parameters = resolve_parameters(kind, request.operation_parameters())
            prompt = build_prompt(kind, parameters, image)
            response = await self.gemini_client.generate_content(prompt, IMAGE_RESPONSE_MODALITIES)
            data_uri = extract_media_data_uri(response, kind)
            print(f"✅ [{kind.value}] {label} completed")
            return GenerationResult.succeeded(data_uri)

        except Exception as e:
            print(f"❌ [{kind.value}] {label} failed. Original error ({type(e).__name__}): {str(e)}")
            classified = self.classifier.classify(e, label)
            return GenerationResult.failed(classified.category, classified.message)

    async def smart_enhance(self, request: ImageOperationRequest) -> GenerationResult:
        return await self.run_image_operation(OperationKind.SMART_ENHANCE, request)

    async def colorize(self, request: ImageOperationRequest) -> GenerationResult:
        return await self.run_image_operation(OperationKind.COLORIZE, request)

    async def remove_scratches(self, request: ImageOperationRequest) -> GenerationResult:
        return await self.run_image_operation(OperationKind.REMOVE_SCRATCHES, request)

    async def focus_enhance_face(self, request: ImageOperationRequest) -> GenerationResult:
        return await self.run_image_operation(OperationKind.FOCUS_ENHANCE_FACE, request)

    async def sharpen(self, request: ImageOperationRequest) -> GenerationResult:
        return await self.run_image_operation(OperationKind.SHARPEN, request)

    async def remove_background(self, request: ImageOperationRequest) -> GenerationResult:
        return await self.run_image_operation(OperationKind.REMOVE_BACKGROUND, request)

    async def apply_filter(self, request: ImageOperationRequest) -> GenerationResult:
        return await self.run_image_operation(OperationKind.APPLY_FILTER, request)

    async def suggest_improvements(self, request: ImageOperationRequest) -> Tuple[bool, List[str], Optional[str]]:
        """Ask the text model for improvement ideas

        Returns:
            (success, suggestions, error_message)
        """
        label = operation_label(None)
        try:
            image = await normalize_image_input(request, fetch_timeout=self.gemini_client.fetch_timeout)
            prompt = build_suggestions_prompt(image)
            response = await self.gemini_client.generate_content(
                prompt,
                TEXT_RESPONSE_MODALITIES,
                model=self.gemini_client.text_model
            )
            suggestions = parse_suggestions(extract_text(response))
            if not suggestions:
                return False, [], "AI model did not return any suggestions. Please try again later."
            return True, suggestions, None

        except Exception as e:
            print(f"❌ [suggest_improvements] {label} failed. Original error ({type(e).__name__}): {str(e)}")
            return False, [], self.classifier.classify(e, label).message
