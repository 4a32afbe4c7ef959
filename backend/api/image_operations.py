from fastapi import APIRouter, Depends, Request

from core.gemini import GeminiClient
from models.image_operation import (
    OperationKind,
    ImageOperationRequest,
    GenerationResult,
    EnhancedPhotoResponse,
    FilteredPhotoResponse,
    SuggestImprovementsResponse,
)
from services.image_operation_service import ImageOperationService

router = APIRouter(prefix="/image-operations", tags=["image-operations"])

def get_gemini_client(request: Request) -> GeminiClient:
    return request.app.state.gemini_client

def get_image_operation_service(gemini_client: GeminiClient = Depends(get_gemini_client)) -> ImageOperationService:
    return ImageOperationService(gemini_client)

def to_enhanced_response(result: GenerationResult) -> EnhancedPhotoResponse:
    return EnhancedPhotoResponse(
        success=result.success,
        enhanced_photo_data_uri=result.data_uri,
        error=result.error,
        error_category=result.error_category
    )

async def run_enhancement(kind: OperationKind, request: ImageOperationRequest, service: ImageOperationService) -> EnhancedPhotoResponse:
    result = await service.run_image_operation(kind, request)
    return to_enhanced_response(result)

@router.post("/smart-enhance", response_model=EnhancedPhotoResponse)
async def smart_enhance(request: ImageOperationRequest, service: ImageOperationService = Depends(get_image_operation_service)):
    """Upscale, denoise and sharpen faces in one pass"""
    return await run_enhancement(OperationKind.SMART_ENHANCE, request, service)

@router.post("/colorize", response_model=EnhancedPhotoResponse)
async def colorize(request: ImageOperationRequest, service: ImageOperationService = Depends(get_image_operation_service)):
    """Colorize a black and white photo or boost colors of a color one"""
    return await run_enhancement(OperationKind.COLORIZE, request, service)

@router.post("/remove-scratches", response_model=EnhancedPhotoResponse)
async def remove_scratches(request: ImageOperationRequest, service: ImageOperationService = Depends(get_image_operation_service)):
    """Remove scratches, creases and small tears from an old photo"""
    return await run_enhancement(OperationKind.REMOVE_SCRATCHES, request, service)

@router.post("/focus-enhance-face", response_model=EnhancedPhotoResponse)
async def focus_enhance_face(request: ImageOperationRequest, service: ImageOperationService = Depends(get_image_operation_service)):
    """Enhance the main face; enhancementStyle defaults to 'natural clarity'"""
    return await run_enhancement(OperationKind.FOCUS_ENHANCE_FACE, request, service)

@router.post("/sharpen", response_model=EnhancedPhotoResponse)
async def sharpen(request: ImageOperationRequest, service: ImageOperationService = Depends(get_image_operation_service)):
    return await run_enhancement(OperationKind.SHARPEN, request, service)

@router.post("/remove-background", response_model=EnhancedPhotoResponse)
async def remove_background(request: ImageOperationRequest, service: ImageOperationService = Depends(get_image_operation_service)):
    return await run_enhancement(OperationKind.REMOVE_BACKGROUND, request, service)

@router.post("/apply-filter", response_model=FilteredPhotoResponse)
async def apply_filter(request: ImageOperationRequest, service: ImageOperationService = Depends(get_image_operation_service)):
    """Apply a named stylistic filter (filterName is required)"""
    result = await service.run_image_operation(OperationKind.APPLY_FILTER, request)
    return FilteredPhotoResponse(
        success=result.success,
        filtered_photo_data_uri=result.data_uri,
        error=result.error,
        error_category=result.error_category
    )

@router.post("/suggest-improvements", response_model=SuggestImprovementsResponse)
async def suggest_improvements(request: ImageOperationRequest, service: ImageOperationService = Depends(get_image_operation_service)):
    """List concrete improvement ideas for a photo"""
    success, suggestions, error = await service.suggest_improvements(request)
    return SuggestImprovementsResponse(
        success=success,
        suggested_improvements=suggestions,
        error=error
    )

@router.get("/health")
async def check_gemini_config(gemini_client: GeminiClient = Depends(get_gemini_client)):
    """Check if the Gemini API key is configured"""
    has_key = gemini_client.is_configured

    return {
        "configured": has_key,
        "model": gemini_client.image_model,
        "message": "GOOGLE_API_KEY configured" if has_key else "GOOGLE_API_KEY not set"
    }
