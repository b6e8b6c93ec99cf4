"""
Links Router - Shortens URLs and follows short ids.
"""
from typing import Optional

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from . import dependencies
from .dependencies import get_link_service
from ..api.dto import HealthDTO, ShortenResponseDTO
from ..api.exceptions import LinkExpiredError, LinkNotFoundError, handle_business_exception
from ..core import config
from ..middleware.rate_limit import rate_limit_per_minute
from ..utils import is_redirect_target

router = APIRouter()


def fallback_response():
    """Redirect to REDIRECT_URI when one is configured, else 404."""
    if is_redirect_target(config.REDIRECT_URI):
        return RedirectResponse(config.REDIRECT_URI, status_code=301)
    raise HTTPException(status_code=404, detail="Not found")


@router.get("/health", response_model=HealthDTO)
async def health():
    """Liveness check including binding state."""
    binding = dependencies.binding
    return HealthDTO(status="ok", binding=type(binding).__name__ if binding else None)


@router.get("/")
async def index():
    """There is no bundled UI; unknown visitors go to the fallback."""
    return fallback_response()


@router.post("/shorten", response_model=ShortenResponseDTO)
@rate_limit_per_minute
async def shorten(
    request: Request,
    url: Optional[str] = Form(None),
    linkid: Optional[str] = Form(None),
    expiry: Optional[str] = Form(None)
):
    """Store url under linkid (or a generated id) with an optional expiry."""
    if config.NOUI:
        return fallback_response()
    if not url:
        raise HTTPException(status_code=400, detail="Missing url")

    link_service = get_link_service()
    try:
        short_id = await link_service.shorten(url, linkid, expiry)
    except Exception as e:
        raise handle_business_exception(e) from e
    return ShortenResponseDTO(message=short_id)


@router.get("/{short_id}")
async def follow(short_id: str):
    """Redirect to the stored link."""
    link_service = get_link_service()
    try:
        full_link = await link_service.resolve(short_id)
    except LinkNotFoundError:
        return fallback_response()
    except LinkExpiredError as e:
        return JSONResponse(status_code=418, content={"detail": str(e)})
    except Exception as e:
        raise handle_business_exception(e) from e
    return RedirectResponse(full_link, status_code=307)
