import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog.cache import cache
from blog.config import settings
from blog.database import Base, engine
from blog.exceptions import BlogError
from blog.middleware import TimingMiddleware
from blog.routers import articles, comments, metrics, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    if settings.AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready")
    await cache.connect()
    yield
    # Shutdown
    await cache.disconnect()
    await engine.dispose()


app = FastAPI(
    title="Blog API",
    description="Articles, comments and user accounts for a small blog",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(articles.router)
app.include_router(comments.router)
app.include_router(users.router)
app.include_router(metrics.router)

# Uploaded article images
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)


# ---------------------------------------------------------------------------
# Error envelope: every failure is {"success": false, "error": "..."}
# ---------------------------------------------------------------------------

def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _describe_validation_error(errors) -> str:
    """Render the first pydantic error as '<field>: <message>'."""
    if not errors:
        return "Invalid request"
    err = errors[0]
    field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
    message = err.get("msg", "Invalid value")
    if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
        message = str(err["ctx"]["error"])
    return f"{field}: {message}" if field else message


@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(400, _describe_validation_error(exc.errors()))


@app.exception_handler(ValidationError)
async def model_validation_handler(request: Request, exc: ValidationError):
    return error_response(400, _describe_validation_error(exc.errors()))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


@app.get("/")
async def root():
    return {"success": True, "message": "Blog API is running"}


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
