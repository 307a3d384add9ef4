import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from . import __version__, config
from .adaptors import Adaptor, create_adaptor
from .domain.events import router as events_router
from .domain.people import router as people_router
from .domain.stats import router as stats_router
from .domain.tasks import router as tasks_router
from .errors import AdaptorError, JelliFitError
from .rate_limiter import RateLimiter, rate_limit_middleware
from .state import SharedAdaptor

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    adaptor: Optional[Adaptor] = None, rate_limiter: Optional[RateLimiter] = None
) -> FastAPI:
    """
    Build the application.

    Tests pass their own adaptor and rate limiter; otherwise both come from
    the environment when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🪼 Jelli Fit API v{__version__} starting in {config.ENVIRONMENT} mode")
        shared = SharedAdaptor(adaptor or create_adaptor())
        await shared.setup()
        app.state.shared_adaptor = shared
        app.state.rate_limiter = rate_limiter or RateLimiter.from_config()
        yield
        logger.info("Application shutting down...")
        await shared.close()

    app = FastAPI(
        title="Jelli Fit API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        openapi_url="/docs/openapi.json",
    )

    @app.exception_handler(JelliFitError)
    async def jellifit_exception_handler(request: Request, exc: JelliFitError):
        if isinstance(exc, AdaptorError):
            logger.error(
                f"{request.method} {request.url.path} - storage failure: {exc!r}",
                exc_info=exc.__cause__,
            )
        else:
            logger.info(f"{request.method} {request.url.path} - {exc.status_code} {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

    # Rate limiting covers every route, docs included
    app.middleware("http")(rate_limit_middleware)

    # CORS Configuration
    frontend_origin = config.get_frontend_origin()
    logger.info(f"CORS allowed origin: {frontend_origin}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[frontend_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Authorization", "Accept", "Content-Type"],
    )

    # Routes
    app.include_router(stats_router)
    app.include_router(events_router)
    app.include_router(people_router)
    app.include_router(tasks_router)

    @app.get("/", response_class=PlainTextResponse, tags=["info"])
    async def root():
        return f"Jelli Fit API v{__version__}"

    return app


app = create_app()


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run("jellifit_api.main:app", host="0.0.0.0", port=3000)
