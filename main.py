# 📦 main.py

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import start_http_server
import structlog
import uvicorn

from api.handlers import router as api_router
from schemas.schemas import ErrorResponse
from services.matcher_service import get_matching_config
from settings import settings
from utils.errors import MatchingConfigurationError

log = structlog.get_logger()

# ─────────────────────────────
# API Setup
app = FastAPI(title=settings.app_name, version=settings.version)
app.include_router(api_router)


@app.exception_handler(MatchingConfigurationError)
async def configuration_error_handler(request: Request, exc: MatchingConfigurationError):
    log.error("Configuration error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(status="error", message="Matching service is misconfigured.", info=str(exc)).model_dump(),
    )

# ─────────────────────────────
# Startup event
@app.on_event("startup")
async def startup_event():
    # Fail fast on broken weights or mapping
    config = get_matching_config()
    log.info("Matching engine ready", min_results=config.min_results, weights=config.weights.model_dump())
    if settings.prometheus_port:
        start_http_server(settings.prometheus_port)
        log.info("Prometheus metrics server started", port=settings.prometheus_port)

# ─────────────────────────────
# Main entrypoint
if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
    )
