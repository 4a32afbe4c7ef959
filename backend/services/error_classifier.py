"""
Error classification for image operations.

Maps any pipeline failure to one ErrorCategory and a user-facing message.
Provider errors are matched against an ordered rule table (first match
wins); input errors raised before the provider call are reported verbatim.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from models.image_operation import OperationKind, ErrorCategory
from services.input_normalizer import ImageInputError
from services.prompt_builder import MissingParameterError

OPERATION_LABELS: Dict[OperationKind, str] = {
    OperationKind.SMART_ENHANCE: "Photo enhancement",
    OperationKind.COLORIZE: "Photo colorization",
    OperationKind.REMOVE_SCRATCHES: "Scratch removal",
    OperationKind.FOCUS_ENHANCE_FACE: "Face-focused enhancement",
    OperationKind.SHARPEN: "Image sharpening",
    OperationKind.REMOVE_BACKGROUND: "Background removal",
    OperationKind.APPLY_FILTER: "Filter application",
}

ROBOTS_NOINDEX_PAGE = '<html><head><meta name="robots" content="noindex"/></head><body>'
UNCLASSIFIED_MAX_LENGTH = 200
TRUNCATED_HTML_MAX_LENGTH = 300


@dataclass(frozen=True)
class ClassifiedError:
    category: ErrorCategory
    message: str


@dataclass(frozen=True)
class ClassificationRule:
    """predicate(original_text, lowered_text) -> bool"""
    category: ErrorCategory
    predicate: Callable[[str, str], bool]
    message_template: str


def contains_any(*needles: str) -> Callable[[str, str], bool]:
    return lambda original, lower: any(needle in lower for needle in needles)


def is_truncated_html(original: str, lower: str) -> bool:
    return (
        "<html" in lower
        and "</html>" not in lower
        and len(original) < TRUNCATED_HTML_MAX_LENGTH
        and ROBOTS_NOINDEX_PAGE not in lower
    )


def is_upstream_fault(original: str, lower: str) -> bool:
    return (
        original.startswith("CRITICAL:")
        or "an error occurred in the server components render" in lower
        or ("google ai" in lower and "failed" in lower)
        or "internal server error" in lower
        or "failed to fetch" in lower
        or is_truncated_html(original, lower)
    )


# Order matters: the first matching rule decides the category.
DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(
        ErrorCategory.REGION_UNAVAILABLE,
        contains_any("not available in your country", "image generation is not available in your country"),
        "{operation} failed: This AI feature is not available in your current region/country. "
        "Please check Google Cloud service availability.",
    ),
    ClassificationRule(
        ErrorCategory.UPSTREAM_SERVER_FAULT,
        is_upstream_fault,
        "CRITICAL: {operation} failed due to a server-side configuration issue. YOU MUST CHECK THE SERVER LOGS "
        "for the detailed error. This is often related to the Google AI API key, billing, or permissions "
        "in your production environment.",
    ),
    ClassificationRule(
        ErrorCategory.INVALID_CREDENTIALS,
        contains_any("api key not valid", "permission denied", "authentication failed", "api_key_not_valid"),
        "{operation} failed: Server configuration error (API key, permissions). Please check the server logs "
        "and contact support. Ensure GOOGLE_API_KEY is correctly set as a secure environment variable.",
    ),
    ClassificationRule(
        ErrorCategory.QUOTA_EXCEEDED,
        contains_any("quota", "limit"),
        "{operation} failed: Service demand/quota limit reached. Please try again later. Check the server logs.",
    ),
    ClassificationRule(
        ErrorCategory.BILLING_ISSUE,
        contains_any("billing account not found", "billing", "project_not_linked_to_billing_account"),
        "{operation} failed: Billing account issue. Please check the server logs and contact support. "
        "Ensure your Google Cloud project has an active billing account.",
    ),
    ClassificationRule(
        ErrorCategory.SAFETY_BLOCKED,
        contains_any("blocked by safety setting", "safety policy violation"),
        "{operation} failed: Image blocked by content safety policy. Try a different image.",
    ),
    ClassificationRule(
        ErrorCategory.NO_MEDIA_RETURNED,
        contains_any("ai model did not return an image"),
        "{original}",
    ),
    ClassificationRule(
        ErrorCategory.API_NOT_ENABLED,
        contains_any("generative language api has not been used", "api is not enabled"),
        "{operation} failed: The Google Generative Language API is not enabled for your project or has not "
        "been used before. Please enable it in the Google Cloud Console and try again. "
        "Check the server logs for details.",
    ),
)

UNCLASSIFIED_TEMPLATE = "{operation} error: {details} (Check the server logs for full details)"
UNCLASSIFIED_FALLBACK_DETAILS = "See server logs for full details."


def error_text(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


class ErrorClassifier:
    """Ordered substring classifier; swap the rule table without touching callers"""

    def __init__(self, rules: Sequence[ClassificationRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def classify_message(self, message: str, operation: str) -> ClassifiedError:
        lower = message.lower()
        for rule in self.rules:
            if rule.predicate(message, lower):
                return ClassifiedError(
                    rule.category,
                    rule.message_template.format(operation=operation, original=message),
                )

        details = message if len(message) < UNCLASSIFIED_MAX_LENGTH else UNCLASSIFIED_FALLBACK_DETAILS
        return ClassifiedError(
            ErrorCategory.UNCLASSIFIED,
            UNCLASSIFIED_TEMPLATE.format(operation=operation, details=details),
        )

    def classify(self, error: BaseException, operation: str) -> ClassifiedError:
        """
        Classify a pipeline failure

        Args:
            error: Exception raised by the normalizer, prompt builder, invoker or extractor
            operation: Human-readable operation name used in the message

        Returns:
            ClassifiedError with category and display message
        """
        if isinstance(error, ImageInputError):
            return ClassifiedError(error.category, str(error))
        if isinstance(error, MissingParameterError):
            return ClassifiedError(ErrorCategory.INVALID_INPUT, str(error))
        return self.classify_message(error_text(error), operation)


def operation_label(kind: Optional[OperationKind]) -> str:
    if kind is None:
        return "Improvement suggestion"
    return OPERATION_LABELS[kind]
