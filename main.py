"""
Main API module for Shortlink Platform.

Responsibilities:
    - Expose REST endpoints to create, list, inspect and delete short links
    - Redirect short codes to their target URL while counting clicks
    - Provide an analytics summary and a health endpoint derived from the store

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - In-memory Storage by default; PostgreSQL via SHORTLINK_STORAGE_BACKEND.
    - LinkManager owns validation, code allocation and click recording; routes
      only translate HTTP to manager calls and LinkError subclasses to status codes.

LLM Prompt Example:
    "Explain how to structure a FastAPI service with an application factory,
    injected dependencies, and a clean separation between API and business logic."
"""

import logging
from typing import Any, Dict, FrozenSet, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from shortlink_platform.analytics.analytics import Analytics
from shortlink_platform.config import settings
from shortlink_platform.errors import LinkError, LinkNotFoundError, StoreUnavailableError
from shortlink_platform.manager.link_manager import LinkManager
from shortlink_platform.manager.strategies import BaseStrategy
from shortlink_platform.models import utcnow
from shortlink_platform.storage.base import BaseStorage
from shortlink_platform.storage.storage_factory import get_storage


class CreateLinkRequest(BaseModel):
    """Request payload for creating a new short link."""
    targetUrl: Optional[str] = None
    shortCode: Optional[str] = None


def _redirect_response(target_url: str) -> Response:
    """
    302 to `target_url` with the Location header passed through verbatim.

    Header values must be latin-1 without control characters; anything else
    goes through Starlette's RedirectResponse, which percent-encodes it.
    """
    if target_url.isascii() and target_url.isprintable():
        return Response(status_code=302, headers={"location": target_url})
    return RedirectResponse(url=target_url, status_code=302)


def _fixed_path_codes(app: FastAPI) -> FrozenSet[str]:
    """Names of parameterless single-segment routes, e.g. "healthz", "docs"."""
    codes = set()
    for route in app.routes:
        path = getattr(route, "path", "")
        if path.count("/") == 1 and "{" not in path and len(path) > 1:
            codes.add(path[1:])
    return frozenset(codes)


def create_app(
    storage: Optional[BaseStorage] = None,
    code_strategy: Optional[BaseStrategy] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage (Optional[BaseStorage]): Injected backend; chosen from env when omitted.
        code_strategy (Optional[BaseStrategy]): Injected code generator (tests).

    Returns:
        FastAPI: A fully configured application with its own storage,
                 manager and analytics instances.
    """
    app = FastAPI(
        title="Shortlink Platform",
        description="URL shortener with custom codes, click tracking and link analytics",
        docs_url="/docs",
    )
    log = logging.getLogger("shortlink")

    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    if storage is None:
        storage = get_storage(ensure_schema=True)
    manager = LinkManager(storage=storage, code_strategy=code_strategy)
    analytics = Analytics(storage=storage)
    log.info("Shortlink storage backend: %s", type(storage).__name__)

    app.state.storage = storage
    app.state.manager = manager
    app.state.analytics = analytics

    @app.exception_handler(LinkError)
    async def _link_error_handler(request: Request, exc: LinkError) -> JSONResponse:
        if isinstance(exc, StoreUnavailableError):
            log.error("Store unavailable during %s %s", request.method, request.url.path)
        return JSONResponse({"detail": exc.message}, status_code=exc.status_code)

    # ----------------------------------------------------------------
    # Health
    # ----------------------------------------------------------------
    @app.get("/healthz")
    def healthz() -> Response:
        """Liveness plus link/click totals, queried fresh from the store."""
        try:
            total_links = storage.count_links()
            total_clicks = storage.sum_clicks()
        except StoreUnavailableError:
            log.exception("Health check failed")
            return JSONResponse(
                {
                    "status": "error",
                    "timestamp": utcnow().isoformat(),
                    "totalLinks": 0,
                    "totalClicks": 0,
                    "environment": "error",
                },
                status_code=500,
            )
        return JSONResponse(
            {
                "status": "ok",
                "timestamp": utcnow().isoformat(),
                "totalLinks": total_links,
                "totalClicks": total_clicks,
                "environment": settings.ENVIRONMENT,
            }
        )

    # ----------------------------------------------------------------
    # Link API
    # ----------------------------------------------------------------
    @app.post("/api/links", status_code=201)
    def create_link(req: CreateLinkRequest, request: Request) -> Dict[str, Any]:
        """
        Create a short link for a URL, optionally with a custom 6-8 char code.

        Returns:
            dict: {"success": True, "link": {...}, "shortUrl": absolute redirect URL}

        Errors:
            400 invalid URL or code format, 409 code taken,
            500 no free code found, 503 store unavailable.
        """
        link = manager.create_link(req.targetUrl, req.shortCode)
        return {
            "success": True,
            "link": link.to_dict(),
            "shortUrl": str(request.url_for("redirect_link", code=link.short_code)),
        }

    @app.get("/api/links")
    def list_links(
        search: Optional[str] = Query(None, description="Substring of code or target URL."),
        sort_by: str = Query("date", description="date | clicks | name"),
        order: str = Query("desc", description="asc | desc"),
    ) -> List[Dict[str, Any]]:
        """All links, newest first unless another sort is requested."""
        try:
            links = manager.list_links(search=search, sort_by=sort_by, order=order)
        except ValueError as ve:
            raise HTTPException(status_code=400, detail=str(ve))
        return [link.to_dict() for link in links]

    @app.get("/api/links/{code}")
    def get_link(code: str) -> Dict[str, Any]:
        """One link with its activity bucket."""
        link = manager.get_link(code)
        data = link.to_dict()
        data["status"] = analytics.link_status(link).to_dict()
        return data

    @app.delete("/api/links/{code}", status_code=204)
    def delete_link(code: str) -> Response:
        manager.delete_link(code)
        return Response(status_code=204)

    @app.post("/api/links/{code}/click")
    def record_click(code: str) -> Dict[str, Any]:
        """Count a click without redirecting; returns the updated link."""
        return manager.record_click(code).to_dict()

    @app.get("/api/analytics/summary")
    def analytics_summary() -> Dict[str, Any]:
        return analytics.summary()

    # ----------------------------------------------------------------
    # Redirect (registered last so it never shadows the routes above)
    # ----------------------------------------------------------------
    @app.get("/{code}", name="redirect_link")
    def redirect_link(code: str, request: Request) -> Response:
        """
        Resolve a short code and redirect to its target URL.

        Notes:
            - The click is recorded before the response is built.
            - Clients asking for JSON get {"targetUrl", "clicks"} instead of a 302.
            - Unknown and deleted codes both answer 404 "Invalid link".
        """
        try:
            link = manager.resolve(code)
        except LinkNotFoundError:
            raise HTTPException(status_code=404, detail="Invalid link")

        accept = request.headers.get("accept", "").lower()
        if "application/json" in accept and "text/html" not in accept:
            return JSONResponse({"targetUrl": link.target_url, "clicks": link.clicks})
        return _redirect_response(link.target_url)

    # Single-segment fixed paths shadow /{code}; never hand them out as codes
    manager.reserved_codes = _fixed_path_codes(app)

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
