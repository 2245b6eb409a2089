"""HTTP API over the scrapers.

Run with:
    uvicorn src.api:app --port 3000
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.browser.renderer import BrowserSession
from src.cache import ResponseCache
from src.config import Settings, get_settings
from src.errors import ProductNotFound, ScraperError, ValidationFailed
from src.models import SCRAPE_REQUEST_EXAMPLE, ScrapeRequest, SearchRequest
from src.orchestrator import ScraperOrchestrator
from src.scrapers.generic_scraper import validate_site_config
from src.scrapers.registry import get_available_sites
from src.utils.log_setup import configure_logging

API_VERSION = "2.0.0"


def get_orchestrator(request: Request) -> ScraperOrchestrator:
    return request.app.state.orchestrator


def require_api_key(
    x_api_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Enforce X-API-Key when an API key is configured."""
    if settings.api_key and x_api_key != settings.api_key:
        raise StarletteHTTPException(status_code=403, detail="Invalid or missing API key")


router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)])


@router.post("/search")
async def search(
    body: SearchRequest, orchestrator: ScraperOrchestrator = Depends(get_orchestrator)
):
    payload, cached = await orchestrator.search(body.query, body.page, body.per_page)
    return {**payload, "cached": cached}


@router.get("/product/{product_code}")
async def get_product(
    product_code: str, orchestrator: ScraperOrchestrator = Depends(get_orchestrator)
):
    payload, cached = await orchestrator.get_product(product_code)
    return {**payload, "cached": cached}


@router.post("/scrape")
async def scrape(
    body: ScrapeRequest, orchestrator: ScraperOrchestrator = Depends(get_orchestrator)
):
    if body.site_config is None or not body.query:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Both siteConfig and query are required",
                "example": SCRAPE_REQUEST_EXAMPLE,
            },
        )

    site_config = validate_site_config(body.site_config.to_site_config())
    payload, cached = await orchestrator.scrape(site_config, body.query)
    return {**payload, "cached": cached}


@router.post("/cache/clear")
async def clear_cache(orchestrator: ScraperOrchestrator = Depends(get_orchestrator)):
    orchestrator.cache.clear()
    return {"message": "Cache cleared successfully"}


@router.get("/cache/stats")
async def cache_stats(orchestrator: ScraperOrchestrator = Depends(get_orchestrator)):
    return orchestrator.cache.stats()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _handle_validation_failed(request: Request, exc: ValidationFailed):
    return _error(400, str(exc))


async def _handle_request_validation(request: Request, exc: RequestValidationError):
    messages = [
        f"{'.'.join(str(part) for part in err['loc'][1:])}: {err['msg']}"
        for err in exc.errors()
    ]
    return _error(400, "; ".join(messages) or "Invalid request")


async def _handle_not_found(request: Request, exc: ProductNotFound):
    return _error(404, str(exc))


async def _handle_scraper_error(request: Request, exc: ScraperError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return _error(500, str(exc))


async def _handle_http_exception(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


def create_app(orchestrator: Optional[ScraperOrchestrator] = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        orchestrator: Preassembled orchestrator. When omitted, the lifespan
            launches a BrowserSession and closes it at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if orchestrator is not None:
            yield
            return

        settings = get_settings()
        configure_logging(settings)

        browser = BrowserSession(headless=settings.headless)
        app.state.orchestrator = ScraperOrchestrator(
            browser,
            site=settings.default_site,
            cache=ResponseCache(ttl_seconds=settings.cache_ttl_seconds),
        )
        logger.info(
            f"Scraper API ready (site: {settings.default_site}, "
            f"API key configured: {'yes' if settings.api_key else 'no'})"
        )
        try:
            yield
        finally:
            await browser.close()

    app = FastAPI(
        title="Product Scraper API",
        description="Headless-browser product search and detail extraction",
        version=API_VERSION,
        lifespan=lifespan,
    )
    if orchestrator is not None:
        app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationFailed, _handle_validation_failed)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(ProductNotFound, _handle_not_found)
    app.add_exception_handler(ScraperError, _handle_scraper_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)

    @app.get("/")
    def root():
        """Health check."""
        return {
            "status": "ok",
            "message": "Product Scraper API",
            "version": API_VERSION,
            "sites": get_available_sites(),
            "features": ["site-search", "product-detail", "config-driven"],
        }

    app.include_router(router)
    return app


app = create_app()
