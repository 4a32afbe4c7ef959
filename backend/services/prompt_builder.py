from typing import Dict, Any, Mapping

from models.image_operation import OperationKind, GenerationPrompt, MediaPart, TextPart

DEFAULT_ENHANCEMENT_STYLE = "natural clarity"

# One instruction template per operation. Placeholders are filled with str.format.
PROMPT_TEMPLATES: Dict[OperationKind, str] = {
    OperationKind.SMART_ENHANCE: (
        "Dramatically enhance the provided image. Perform a significant upscaling, aiming for at least a 4x "
        "resolution increase, ensuring maximum detail and sharpness. Aggressively reduce noise and artifacts. "
        "For human faces, bring out fine details, improve skin texture, and enhance eye clarity for a striking, "
        "yet natural result. The output should be a remarkably improved, high-definition version of the original, "
        "while respecting its core composition."
    ),
    OperationKind.COLORIZE: (
        "Transform the provided image with rich, vivid, and lifelike colors. If it's black and white or grayscale, "
        "apply a full, high-fidelity colorization that is both historically accurate (if applicable) and "
        "aesthetically stunning. Aim for deep, natural tones and excellent contrast. If already in color, "
        "significantly boost its vibrancy, correct any color casts, and enhance overall color harmony for a "
        "professional, eye-catching result."
    ),
    OperationKind.REMOVE_SCRATCHES: (
        "Analyze the provided image. Identify and carefully remove scratches, creases, small tears, and other minor "
        "physical damages. The goal is to restore the image to a cleaner state while preserving original details, "
        "textures, and the overall character of the photo. Avoid over-smoothing or creating an artificial look."
    ),
    OperationKind.FOCUS_ENHANCE_FACE: (
        "Identify the primary human face in this image. Apply a '{enhancementStyle}' enhancement specifically to the "
        "facial features. Improve skin texture to look smooth yet natural, enhance eye clarity and sparkle, and refine "
        "details like lip definition and hair texture around the face. Ensure the enhancements blend seamlessly with "
        "the rest of the image and preserve the original character."
    ),
    OperationKind.SHARPEN: (
        "Analyze the provided image and apply a sharpening effect to enhance fine details, textures, and edges. "
        "The goal is to make the image appear crisper and more defined without introducing excessive noise or "
        "artifacts. Focus on improving overall clarity and definition."
    ),
    OperationKind.REMOVE_BACKGROUND: (
        "Your task is to precisely remove the background from this image. Identify the primary subject(s) with "
        "extreme accuracy. Create a clean, sharp cutout with a fully transparent background. Pay special attention "
        "to complex edges like hair, fur, or fine details, ensuring no background remnants are left and the "
        "subject's edges are not cropped. The final output must be a high-quality PNG with a perfect alpha channel. "
        "Do not add any watermark or alter the subject itself."
    ),
    OperationKind.APPLY_FILTER: (
        "You are an expert AI photo filtering engine. Your single, most important task is to apply a stylistic "
        "filter named \"{filterName}\" to this image while **strictly preserving the original subject's identity, "
        "pose, and core composition.**\n\n"
        "Follow these critical instructions:\n"
        "1.  **Analyze the Filter Name:** Interpret the creative style from the filter name: \"{filterName}\".\n"
        "2.  **Apply Style:** Re-render the image with the requested artistic style. For example, if the filter is "
        "'Sketch', make the image look like a hand-drawn sketch. If it's 'Vintage Film', apply color grading, grain, "
        "and lighting from that era.\n"
        "3.  **Identity is Paramount:** The output must clearly be the same person and subject. Do not alter bone "
        "structure, jawline, or unique facial characteristics. The pose and main objects must remain the same.\n"
        "4.  **No Watermarks:** Do not add any watermark or text to the image."
    ),
}

SUGGEST_IMPROVEMENTS_TEMPLATE = (
    "You are an AI expert in image enhancement.\n\n"
    "Given the image, suggest a few potential improvements to enhance its visual appeal. Suggest concrete actions "
    "like adjusting brightness, contrast, sharpness, color balance etc.\n"
    "Return the suggestions as a JSON array of strings and nothing else."
)


class MissingParameterError(ValueError):
    """A required operation parameter was not supplied"""

    def __init__(self, kind: OperationKind, parameter: str):
        self.kind = kind
        self.parameter = parameter
        super().__init__(f"Missing required parameter '{parameter}' for {kind.value}.")


def resolve_parameters(kind: OperationKind, parameters: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply defaults and check required parameters for an operation"""
    resolved = dict(parameters)

    if kind == OperationKind.FOCUS_ENHANCE_FACE:
        style = resolved.get("enhancementStyle")
        if not style or not str(style).strip():
            resolved["enhancementStyle"] = DEFAULT_ENHANCEMENT_STYLE

    if kind == OperationKind.APPLY_FILTER:
        filter_name = resolved.get("filterName")
        if filter_name is None or not str(filter_name).strip():
            raise MissingParameterError(kind, "filterName")

    return resolved


def build_prompt(kind: OperationKind, parameters: Mapping[str, Any], image: str) -> GenerationPrompt:
    """
    Build the prompt for an operation

    Args:
        kind: Operation to run
        parameters: Operation parameters (filterName, enhancementStyle)
        image: Normalized inline data URI

    Returns:
        GenerationPrompt with the image part followed by the instruction text
    """
    resolved = resolve_parameters(kind, parameters)
    text = PROMPT_TEMPLATES[kind].format(**resolved)
    return GenerationPrompt(parts=(MediaPart(image), TextPart(text)))


def build_suggestions_prompt(image: str) -> GenerationPrompt:
    return GenerationPrompt(parts=(MediaPart(image), TextPart(SUGGEST_IMPROVEMENTS_TEMPLATE)))
