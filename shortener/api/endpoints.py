"""
FastAPI Endpoints for URL Shortener Service

Endpoints only handle:
- Reading the request (raw body, path parameter)
- Rate limiting
- Mapping service outcomes to HTTP responses

All business logic is in services.

Status mapping:
- ValidationError -> 400, CodeGenerationExhaustedError -> 409
- not found -> 404, expired -> 410
- StorageError -> 500
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from shortener.api.schemas import ShortenResponse, StatsResponse
from shortener.core.exceptions import (
    CodeGenerationExhaustedError,
    ShortCodeNotFoundError,
    StorageError,
    ValidationError,
)
from shortener.core.rate_limit import limiter, RATE_LIMITS
from shortener.core.setting import Settings
from shortener.core.store_manager import get_mapping_store, get_settings
from shortener.core.validators import sanitize_short_code
from shortener.db.store import MappingStore
from shortener.services.redirect_service import RedirectStatus, ResolveService
from shortener.services.stats_service import StatsService
from shortener.services.url_service import ShortenService

router = APIRouter()


def get_shorten_service(
    store: MappingStore = Depends(get_mapping_store),
    config: Settings = Depends(get_settings),
) -> ShortenService:
    return ShortenService(store, config)


def get_resolve_service(store: MappingStore = Depends(get_mapping_store)) -> ResolveService:
    return ResolveService(store)


def get_stats_service(store: MappingStore = Depends(get_mapping_store)) -> StatsService:
    return StatsService(store)


def _require_short_code(short_code: str, config: Settings) -> str:
    sanitized_code = sanitize_short_code(short_code, config.SHORT_CODE_ALPHABET)
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid short code format: '{short_code}'. Short codes may only use the characters codes are generated from."
        )
    return sanitized_code


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description=(
        "Accepts {\"url\": ..., \"ttl\": minutes} or a bare URL string and "
        "returns a short URL that expires after the TTL"
    )
)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    service: ShortenService = Depends(get_shorten_service),
) -> ShortenResponse:
    raw_body = await request.body()

    try:
        result = await service.shorten(raw_body)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except CodeGenerationExhaustedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return ShortenResponse(
        short_code=result.mapping.short_code,
        short_url=result.short_url,
        original_url=result.mapping.original_url,
        expires_at=result.mapping.expires_at,
    )


@router.get(
    "/stats/{short_code}",
    response_model=StatsResponse,
    summary="Get URL statistics",
    description="Returns the destination, timestamps and click count for a short URL"
)
@limiter.limit(RATE_LIMITS["stats"])
async def get_url_stats(
    short_code: str,
    request: Request,  # Required for rate limiting
    service: StatsService = Depends(get_stats_service),
    config: Settings = Depends(get_settings),
) -> StatsResponse:
    short_code = _require_short_code(short_code, config)

    try:
        stats = await service.get_stats(short_code)
    except ShortCodeNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return StatsResponse(**stats)


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code and redirects to the original long URL"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    short_code: str,
    request: Request,
    service: ResolveService = Depends(get_resolve_service),
    config: Settings = Depends(get_settings),
) -> RedirectResponse:
    short_code = _require_short_code(short_code, config)

    result = await service.try_resolve(short_code)

    if result.status is RedirectStatus.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{short_code}' not found"
        )
    if result.status is RedirectStatus.EXPIRED:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail=f"Short code '{short_code}' has expired"
        )
    if result.status is RedirectStatus.ERROR:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to resolve short code"
        )

    return RedirectResponse(
        url=result.target,
        status_code=status.HTTP_302_FOUND
    )
