from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from interview_booking.base.config import settings
from interview_booking.base.error_handlers import register_exception_handlers
from interview_booking.base.logging_config import app_logger as logger
from interview_booking.routers import candidates, time_slots

# --- FastAPI app instance ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.API_VERSION,
    debug=settings.DEBUG_MODE,
    docs_url=None if settings.IS_PROD else "/docs",
    redoc_url=None if settings.IS_PROD else "/redoc",
    openapi_url="/openapi.json"
)

# --- CORS config ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Prometheus metrics ---
if settings.ENABLE_PROMETHEUS:
    Instrumentator().instrument(app).expose(app)


# --- Logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"📥 {request.method} request to {request.url}")
    response = await call_next(request)
    logger.info(f"📤 Response: {response.status_code} for {request.url}")
    return response


# --- Exception handlers ---
register_exception_handlers(app)

# --- API Routers ---
app.include_router(candidates.router, prefix="/api")
app.include_router(time_slots.router, prefix="/api")


# --- System endpoints ---
@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}


@app.get("/version", tags=["System"])
def version_check():
    return {
        "version": settings.API_VERSION,
        "environment": settings.ENVIRONMENT,
        "storage_backend": settings.STORAGE_BACKEND,
    }
