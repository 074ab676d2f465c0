"""API routes implementation."""

from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from linkmon.database.models import Link
from linkmon.common.url_builder import build_short_url
from linkmon.common.headers import build_base_url, get_forwarded_path_prefix
from .schemas import CreateLinkRequest, ApiResponse

router = APIRouter()


def _respond(response: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=response.statusCode, content=response.model_dump())


def _short_url(request: Request, short_code: str) -> str:
    config = request.app.state.config
    base_url = build_base_url(
        headers=request.headers,
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )
    path_prefix = get_forwarded_path_prefix(request.headers) or config.path_prefix
    return build_short_url(short_code=short_code, base_url=base_url, path_prefix=path_prefix)


def _link_payload(request: Request, link: Link) -> dict:
    payload = link.to_dict()
    payload["shortUrl"] = _short_url(request, link.short_code)
    return payload


@router.post(
    "/links",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Create link",
    description="Create a short link. Optionally provide a custom short code.",
)
async def create_link(request: Request, body: CreateLinkRequest):
    """Create a short link."""
    service = request.app.state.service

    link = await service.create_link(
        target_url=body.targetUrl,
        custom_code=body.customCode,
    )

    return _respond(ApiResponse.ok(
        _link_payload(request, link),
        "Link created successfully",
        status_code=status.HTTP_201_CREATED,
    ))


@router.get(
    "/links",
    response_model=ApiResponse,
    summary="List links",
    description="Paginated list of links, newest first, with optional search on code or URL.",
)
async def list_links(
    request: Request,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
):
    """List links."""
    service = request.app.state.service

    result = await service.list_links(page=page, limit=limit, search=search)

    return _respond(ApiResponse.ok(
        {
            "data": [_link_payload(request, link) for link in result.items],
            "pagination": result.pagination(),
        },
        "Links fetched successfully",
    ))


@router.get(
    "/links/{code}",
    response_model=ApiResponse,
    summary="Link stats",
    description="Link details, click history, recent uptime checks and the 7-day uptime report. "
                "Probes the target once before answering.",
)
async def get_link_stats(request: Request, code: str):
    """Get stats for a link."""
    service = request.app.state.service

    stats = await service.get_link_stats(code)

    payload = stats.to_dict()
    payload["shortUrl"] = _short_url(request, code)
    return _respond(ApiResponse.ok(payload, "Link stats fetched successfully"))


@router.delete(
    "/links/{code}",
    response_model=ApiResponse,
    summary="Delete link",
    description="Delete a link with all of its clicks and uptime checks.",
)
async def delete_link(request: Request, code: str):
    """Delete a link."""
    service = request.app.state.service

    await service.delete_link(code)

    return _respond(ApiResponse.ok(None, "Link deleted successfully"))
