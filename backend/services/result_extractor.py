from typing import Dict, Any, Iterator, List, Optional

from models.image_operation import OperationKind

NO_MEDIA_SUBJECTS: Dict[OperationKind, str] = {
    OperationKind.SMART_ENHANCE: "smart enhancement",
    OperationKind.COLORIZE: "colorization",
    OperationKind.REMOVE_SCRATCHES: "scratch removal",
    OperationKind.FOCUS_ENHANCE_FACE: "face-focused enhancement",
    OperationKind.SHARPEN: "sharpening",
    OperationKind.REMOVE_BACKGROUND: "background removal",
    OperationKind.APPLY_FILTER: "the filter application",
}

NO_MEDIA_MESSAGE = (
    "AI model did not return an image for {subject}. This could be due to content safety filters, "
    "an issue with the input image, or a temporary model problem. Please try a different image or try again later."
)


class NoMediaReturnedError(Exception):
    """The provider answered but sent no image part"""

    def __init__(self, kind: OperationKind, finish_reason: Optional[str] = None):
        self.kind = kind
        self.finish_reason = finish_reason
        super().__init__(no_media_message(kind))


def no_media_message(kind: OperationKind) -> str:
    return NO_MEDIA_MESSAGE.format(subject=NO_MEDIA_SUBJECTS[kind])


def iter_parts(response: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    for candidate in response.get("candidates") or []:
        content = candidate.get("content") or {}
        for part in content.get("parts") or []:
            yield part


def describe_empty_response(response: Dict[str, Any]) -> Optional[str]:
    """Best-effort reason the model produced nothing (block reason or finish reason)"""
    feedback = response.get("promptFeedback") or {}
    if feedback.get("blockReason"):
        return f"prompt blocked: {feedback['blockReason']}"
    reasons = [c.get("finishReason") for c in response.get("candidates") or [] if c.get("finishReason")]
    if reasons:
        return f"finish reason: {', '.join(reasons)}"
    return None


def extract_media_data_uri(response: Dict[str, Any], kind: OperationKind) -> str:
    """Return the first image part of the response as a data URI"""
    for part in iter_parts(response):
        # REST responses use camelCase, SDK dumps use snake_case
        inline = part.get("inlineData") or part.get("inline_data")
        if not inline:
            continue
        mime_type = inline.get("mimeType") or inline.get("mime_type") or ""
        data = inline.get("data")
        if mime_type.startswith("image/") and data:
            return f"data:{mime_type};base64,{data}"

    reason = describe_empty_response(response)
    print(f"⚠️ [{kind.value}] model response contained no image ({reason or 'no details'})")
    raise NoMediaReturnedError(kind, reason)


def extract_text(response: Dict[str, Any]) -> str:
    texts: List[str] = [part["text"] for part in iter_parts(response) if part.get("text")]
    return "\n".join(texts).strip()
