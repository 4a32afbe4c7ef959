from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Tuple, Union
from dataclasses import dataclass
from enum import Enum

class OperationKind(str, Enum):
    SMART_ENHANCE = "smart_enhance"
    COLORIZE = "colorize"
    REMOVE_SCRATCHES = "remove_scratches"
    FOCUS_ENHANCE_FACE = "focus_enhance_face"
    SHARPEN = "sharpen"
    REMOVE_BACKGROUND = "remove_background"
    APPLY_FILTER = "apply_filter"

class ErrorCategory(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    BILLING_ISSUE = "billing_issue"
    API_NOT_ENABLED = "api_not_enabled"
    REGION_UNAVAILABLE = "region_unavailable"
    QUOTA_EXCEEDED = "quota_exceeded"
    SAFETY_BLOCKED = "safety_blocked"
    NO_MEDIA_RETURNED = "no_media_returned"
    UPSTREAM_SERVER_FAULT = "upstream_server_fault"
    NETWORK_FETCH_FAILURE = "network_fetch_failure"
    UNCLASSIFIED = "unclassified"
    # Rejected before any call to the provider
    INVALID_INPUT = "invalid_input"

class ImageOperationRequest(BaseModel):
    """Inbound payload shared by every image operation.

    Exactly one of ``photoDataUri`` / ``imageUrl`` is expected; when both are
    sent the inline payload wins. Operation-specific fields are ignored by
    operations that don't use them.
    """
    model_config = ConfigDict(populate_by_name=True)

    photo_data_uri: Optional[str] = Field(None, alias="photoDataUri")  # data:<mimetype>;base64,<data>
    image_url: Optional[str] = Field(None, alias="imageUrl")
    filter_name: Optional[str] = Field(None, alias="filterName")
    enhancement_style: Optional[str] = Field(None, alias="enhancementStyle")

    def operation_parameters(self) -> Dict[str, Any]:
        """Free-form parameter map handed to the prompt builder"""
        params: Dict[str, Any] = {}
        if self.filter_name is not None:
            params["filterName"] = self.filter_name
        if self.enhancement_style is not None:
            params["enhancementStyle"] = self.enhancement_style
        return params

@dataclass(frozen=True)
class MediaPart:
    data_uri: str

    @property
    def mime_type(self) -> str:
        return self.data_uri[len("data:"):].split(";", 1)[0]

    @property
    def data(self) -> str:
        return self.data_uri.split(",", 1)[1]

    def to_payload(self) -> Dict[str, Any]:
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}

@dataclass(frozen=True)
class TextPart:
    text: str

    def to_payload(self) -> Dict[str, Any]:
        return {"text": self.text}

@dataclass(frozen=True)
class GenerationPrompt:
    """Ordered prompt parts sent to the model; immutable once built"""
    parts: Tuple[Union[MediaPart, TextPart], ...]

    @property
    def text(self) -> str:
        return "\n".join(part.text for part in self.parts if isinstance(part, TextPart))

    def to_contents(self) -> List[Dict[str, Any]]:
        return [{"role": "user", "parts": [part.to_payload() for part in self.parts]}]

class GenerationResult(BaseModel):
    success: bool
    data_uri: Optional[str] = None
    error_category: Optional[ErrorCategory] = None
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, data_uri: str) -> "GenerationResult":
        return cls(success=True, data_uri=data_uri)

    @classmethod
    def failed(cls, category: ErrorCategory, message: str) -> "GenerationResult":
        return cls(success=False, error_category=category, error=message)

# Response models

class ImageOperationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    error: Optional[str] = None
    error_category: Optional[ErrorCategory] = Field(None, alias="errorCategory")

class EnhancedPhotoResponse(ImageOperationResponse):
    enhanced_photo_data_uri: Optional[str] = Field(None, alias="enhancedPhotoDataUri")

class FilteredPhotoResponse(ImageOperationResponse):
    filtered_photo_data_uri: Optional[str] = Field(None, alias="filteredPhotoDataUri")

class SuggestImprovementsResponse(ImageOperationResponse):
    suggested_improvements: List[str] = Field(default_factory=list, alias="suggestedImprovements")
