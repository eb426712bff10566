"""FastAPI route definitions for the link registry.

API Endpoint Overview
=====================
::
    GET  /health
        └─ HealthResponse (200)

    GET  /admin/metrics
        └─ Prometheus text snapshot of registry counters (200)

    GET  /admin/links
        └─ One LinkRecord JSON object per line (200)

    GET  /rev/:url
        └─ ReverseResponse (200) or 404/503

    POST /reg            (form: url, hidden)
    POST /post/:url
        └─ LinkResponse (201) or 409/422/503

    GET  /:slug
        └─ 308 Redirect, 200 HTML redirect (hidden links), or 400/404/503

Key Behaviours
===============
- Routes are thin: parsing and status mapping only, all link semantics
  live in LinkRegistry.
- NotFound → 404, Conflict → 409, Unavailable → 503, malformed slug → 400 (still counted, with an empty slug label).
- Hidden links are served as a client-side redirect with a no-referrer
  policy so intermediaries never see the destination in a Location header.
- /:slug is registered last so it never shadows the fixed paths.
"""

import json
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse, StreamingResponse
from pydantic import ValidationError

from linker.cache import RedirectTarget
from linker.dependencies import RequestContext, get_registry, get_request_context
from linker.enums import Counter, Handler, HealthStatus
from linker.exceptions import Conflict, InvalidSlug, NotFound, StoreError, Unavailable
from linker.registry import LinkRegistry
from linker.schemas import HealthResponse, LinkCreate, LinkRecord, LinkResponse, ReverseResponse
from linker.slug import Slug

__all__ = ["router"]

router = APIRouter()

HIDDEN_REDIRECT_TEMPLATE = (
    "<!DOCTYPE html>"
    '<html><head><meta name="referrer" content="no-referrer"></head>'
    "<body><script>window.location.replace({target});</script></body></html>"
)


def _url_from_path(url: str, request: Request) -> str:
    # {url:path} stops at "?"; the query belongs to the destination.
    query = request.url.query
    return f"{url}?{query}" if query else url


def render_redirect(target: RedirectTarget) -> Response:
    if not target.hidden:
        return RedirectResponse(url=target.url, status_code=308)
    # JSON string literal, with "</" broken up so the URL cannot close the script tag.
    literal = json.dumps(target.url).replace("</", "<\\/")
    return HTMLResponse(
        HIDDEN_REDIRECT_TEMPLATE.format(target=literal),
        headers={"Referrer-Policy": "no-referrer"},
    )


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(ctx: RequestContext = Depends(get_request_context)) -> HealthResponse:
    db_status = HealthStatus.HEALTHY
    try:
        await ctx.registry.ping()
    except StoreError as e:
        ctx.logger.error(f"Database health check failed: {e}")
        db_status = HealthStatus.UNHEALTHY
    return HealthResponse(status=db_status, database=db_status)


@router.get("/admin/metrics", tags=["admin"])
async def admin_metrics(registry: LinkRegistry = Depends(get_registry)) -> Response:
    return Response(content=registry.metrics.render(), media_type=registry.metrics.content_type)


@router.get("/admin/links", tags=["admin"])
async def admin_links(ctx: RequestContext = Depends(get_request_context)) -> StreamingResponse:
    async def lines() -> AsyncIterator[str]:
        try:
            async for link in ctx.registry.iter_links():
                yield LinkRecord.model_validate(link).model_dump_json() + "\n"
        except StoreError as e:
            # Headers are already sent; the truncated body is the only signal left.
            ctx.logger.error(f"Link listing aborted: {e}")

    return StreamingResponse(lines(), media_type="application/x-ndjson")


@router.get("/rev/{url:path}", response_model=ReverseResponse, tags=["links"])
async def reverse(
    url: str,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
) -> ReverseResponse:
    url = _url_from_path(url, request)
    try:
        slug = await ctx.registry.reverse_lookup(url)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail="URL not registered") from exc
    except Unavailable as exc:
        raise HTTPException(status_code=503, detail="Service unavailable") from exc
    return ReverseResponse(slug=str(slug), url=url)


async def _create(payload: LinkCreate, request: Request, ctx: RequestContext) -> LinkResponse:
    ctx.logger.info(
        f"Link creation requested: {payload.url}",
        extra={"operation": "create", "target_url": payload.url, "hidden": payload.hidden},
    )
    try:
        slug = await ctx.registry.create(payload.url, payload.hidden)
    except Conflict as exc:
        ctx.logger.warning(f"Link creation refused: {exc}", extra={"duration_ms": ctx.get_duration()})
        raise HTTPException(status_code=409, detail="URL already registered") from exc
    except Unavailable as exc:
        raise HTTPException(status_code=503, detail="Service unavailable") from exc

    ctx.logger.info(
        f"Link created: {slug}",
        extra={"operation": "create", "slug": slug, "duration_ms": ctx.get_duration()},
    )
    return LinkResponse(
        slug=str(slug),
        url=payload.url,
        short_url=f"{request.base_url}{slug}",
        hidden=payload.hidden,
    )


@router.post("/reg", response_model=LinkResponse, status_code=201, tags=["links"])
async def register(
    payload: Annotated[LinkCreate, Form()],
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
) -> LinkResponse:
    return await _create(payload, request, ctx)


@router.post("/post/{url:path}", response_model=LinkResponse, status_code=201, tags=["links"])
async def register_from_path(
    url: str,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
) -> LinkResponse:
    try:
        payload = LinkCreate(url=_url_from_path(url, request))
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc
    return await _create(payload, request, ctx)


@router.get("/{slug}", tags=["redirect"])
async def resolve(
    slug: str,
    ctx: RequestContext = Depends(get_request_context),
) -> Response:
    try:
        parsed = Slug.parse(slug)
    except InvalidSlug as exc:
        ctx.registry.metrics.increment(Counter.HTTP_REQUESTS, Handler.RESOLVE)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        target = await ctx.registry.resolve(parsed)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail="Short URL not found") from exc
    except Unavailable as exc:
        raise HTTPException(status_code=503, detail="Service unavailable") from exc

    ctx.logger.debug(
        f"Redirect {parsed} -> {target.url}",
        extra={"operation": "resolve", "slug": parsed, "hidden": target.hidden},
    )
    return render_redirect(target)
