import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.health import router as health_router
from storefront.api.routes_categories import router as categories_router
from storefront.api.routes_logs import router as logs_router
from storefront.api.routes_media import router as media_router
from storefront.api.routes_products import router as products_router
from storefront.api.routes_sizes import router as sizes_router
from storefront.config import settings
from storefront.db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    init_db()
    logger.info("Storefront admin API ready (db=%s)", settings.DATABASE_URL)
    yield


app = FastAPI(title="Storefront Admin API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_envelope(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_envelope(request: Request, exc: RequestValidationError):
    # first problem only, phrased like the service-layer messages
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": f"{field}: {message}" if field else message},
    )


@app.exception_handler(Exception)
async def unexpected_error_envelope(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )


app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(products_router)

app.include_router(categories_router)

app.include_router(sizes_router)

app.include_router(logs_router)

app.include_router(media_router)

app.mount("/uploads", StaticFiles(directory=settings.STORAGE_DIR, check_dir=False), name="uploads")


def run():
    import uvicorn

    uvicorn.run("storefront.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
