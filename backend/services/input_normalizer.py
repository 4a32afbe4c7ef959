"""
Input normalization for image operations.

Turns an ImageOperationRequest into the single inline data URI the
generation call needs. Remote references are fetched once with httpx and
re-encoded; inline payloads are validated and passed through.
"""
import base64
import binascii
import re
import httpx
from typing import Optional

from models.image_operation import ImageOperationRequest, ErrorCategory

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[^;,]+);base64,(?P<data>.*)$", re.DOTALL)


class ImageInputError(Exception):
    """Raised before any provider call; the message is shown to the user as is"""
    category = ErrorCategory.INVALID_INPUT


class MissingInputError(ImageInputError):
    def __init__(self):
        super().__init__("No image provided. Send either photoDataUri or imageUrl.")


class InvalidInlineImageError(ImageInputError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid photoDataUri: {reason}")


class FetchFailedError(ImageInputError):
    category = ErrorCategory.NETWORK_FETCH_FAILURE

    def __init__(self, status: Optional[int], reason: Optional[str] = None):
        self.status = status
        self.reason = reason
        if status is not None:
            message = f"Failed to fetch image from URL: HTTP {status}"
            if reason:
                message = f"{message} ({reason})"
        else:
            message = f"Failed to fetch image from URL: {reason or 'request failed'}"
        super().__init__(message)


class InvalidContentTypeError(ImageInputError):
    def __init__(self, got: Optional[str]):
        self.got = got
        super().__init__(f"Invalid content type from URL: expected image/*, got {got or 'nothing'}")


def validate_data_uri(data_uri: str) -> str:
    """Check an inline payload is a non-empty base64 image data URI and return it without surrounding whitespace"""
    data_uri = data_uri.strip()
    match = DATA_URI_PATTERN.match(data_uri)
    if not match:
        raise InvalidInlineImageError("expected format data:<mimetype>;base64,<encoded_data>")

    mime_type = match.group("mime").strip().lower()
    if not mime_type.startswith("image/"):
        raise InvalidInlineImageError(f"media type must be image/*, got {mime_type}")

    data = match.group("data").strip()
    if not data:
        raise InvalidInlineImageError("image data is empty")

    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInlineImageError("image data is not valid base64")
    if not decoded:
        raise InvalidInlineImageError("image data is empty")

    return data_uri


async def fetch_image_as_data_uri(image_url: str, timeout: Optional[float] = None) -> str:
    """Download an image and encode it as data:<content-type>;base64,<data>"""
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(image_url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        print(f"❌ Image fetch failed for {image_url}: {str(e)}")
        raise FetchFailedError(None, str(e)) from e

    if not response.is_success:
        print(f"❌ Image fetch returned {response.status_code} for {image_url}")
        raise FetchFailedError(response.status_code)

    content_type = response.headers.get("content-type", "")
    mime_type = content_type.split(";", 1)[0].strip().lower()
    if not mime_type.startswith("image/"):
        raise InvalidContentTypeError(content_type or None)

    content = response.content
    if len(content) == 0:
        raise FetchFailedError(None, "downloaded image is empty")

    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


async def normalize_image_input(request: ImageOperationRequest, fetch_timeout: Optional[float] = None) -> str:
    """
    Resolve the request's image to an inline data URI

    Args:
        request: Inbound operation request
        fetch_timeout: Timeout for the remote fetch, None to wait indefinitely

    Returns:
        Inline data URI ready for the prompt builder

    Raises:
        MissingInputError, InvalidInlineImageError, FetchFailedError, InvalidContentTypeError
    """
    if request.photo_data_uri:
        return validate_data_uri(request.photo_data_uri)

    if request.image_url:
        return await fetch_image_as_data_uri(request.image_url, timeout=fetch_timeout)

    raise MissingInputError()
