import logging

from fastapi import APIRouter, HTTPException, status
from pagefetch.schemas import ContentRequest, ContentResponse
from pagefetch.services import content as content_service
from pagefetch.core.errors import (
    BlockedAddress,
    ExtractionFailure,
    FetchError,
    FetchTimeout,
    InvalidURL,
)

logger = logging.getLogger(__name__)

router = APIRouter()

def _status_for(error: FetchError) -> int:
    if isinstance(error, InvalidURL):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, BlockedAddress):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, ExtractionFailure):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(error, FetchTimeout):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_502_BAD_GATEWAY

@router.post("/content", response_model=ContentResponse, response_model_exclude_none=True)
async def fetch_page_content(request: ContentRequest):
    """
    Fetch a URL and return its readable title and content.

    The URL is untrusted: private and local destinations are refused,
    including ones reached through DNS or redirects.
    """
    if not request.url.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="url is required"
        )

    try:
        result = await content_service.fetch_content(
            request.url,
            timeout_seconds=request.timeout,
            max_chars=request.max_chars,
        )
    except FetchError as e:
        logger.info("Content request for %s failed: %s", request.url, e)
        raise HTTPException(status_code=_status_for(e), detail=str(e))

    return ContentResponse(url=result.url, title=result.title or None, content=result.content)

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "pagefetch"}
