import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config import settings, load_normalizer_config
from logging_setup import setup_logging
from metrics import router as metrics_router
from normalizer import build_key_builder
from worker import router as worker_router
from worker import traffic_router

logger = logging.getLogger("eventkey.http")

# =========================
# Lifespan (startup / shutdown)
# =========================

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    # A bad normalizer config must stop the service before it serves traffic.
    setup_logging(settings.LOG_LEVEL)
    config = load_normalizer_config(settings.NORMALIZER_CONFIG_PATH)
    app.state.normalizer_config = config
    app.state.key_builder = build_key_builder(config)
    logger.info(f"Normalizer ready (config: {settings.NORMALIZER_CONFIG_PATH or 'defaults'})")
    yield
    # Shutdown (nothing needed yet)


app = FastAPI(
    title="Event Normalizer",
    version="v1",
    lifespan=lifespan,
)


# =========================
# Middleware
# =========================

@app.middleware("http")
async def log_requests(request, call_next):
    logger.debug(f"Incoming request: {request.method} {request.url}")
    response = await call_next(request)
    return response


# =========================
# Routers
# =========================

app.include_router(worker_router)    # /internal/worker
app.include_router(traffic_router)   # /internal/traffic
app.include_router(metrics_router)   # /metrics


# =========================
# Health Check
# =========================

@app.get("/health")
def health():
    return {
        "service": settings.SERVICE_NAME,
        "env": settings.ENV,
        "status": "ok",
    }
