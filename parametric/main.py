"""
Main FastAPI application entry point.
"""

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from parametric.db import initialize_database
from parametric.deps import current_time_index, get_time_index
from parametric.errors import HTTP_STATUS_BY_KIND, InsuranceError
from parametric.routers import oracles, risk_profiles, policies, claims, treasury
from parametric.middleware import RequestLogMiddleware
from parametric.schemas import ErrorResponse
from parametric.cache import config_cache
import logging

# Configure logging
logger = logging.getLogger("parametric_insurance")

app = FastAPI(
    title="Parametric Insurance Engine",
    description="Weather-triggered policies, claim evaluation and payout accounting",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestLogMiddleware)

@app.exception_handler(InsuranceError)
async def insurance_error_handler(request: Request, exc: InsuranceError):
    """Map engine failures to HTTP responses."""
    status_code = HTTP_STATUS_BY_KIND.get(exc.kind, 400)
    logger.warning(
        f"Request rejected | "
        f"request_id={getattr(request.state, 'request_id', 'unknown')} | "
        f"path={request.url.path} | "
        f"error={exc.kind.value} | "
        f"message={exc.message}"
    )
    body = ErrorResponse(error=exc.kind.value, message=exc.message, details=exc.details)
    return JSONResponse(status_code=status_code, content=body.model_dump())

@app.on_event("startup")
async def startup_event():
    """Initialize database and warm up the catalog cache on startup."""
    logger.info("Starting Parametric Insurance Engine...")

    config_cache.get_catalog()
    logger.info(f"Catalog cache warmed up: {len(config_cache.get_risk_profiles())} risk profiles, "
                f"{len(config_cache.get_oracles())} oracles")

    initialize_database(current_time_index())
    logger.info("Startup complete")

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Parametric Insurance Engine", "status": "healthy"}

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}

@app.get("/v1/clock")
async def clock(now: int = Depends(get_time_index)):
    """Current ledger time index."""
    return {"time_index": now}

# Include all routers
app.include_router(oracles.router, prefix="/v1", tags=["oracles"])
app.include_router(risk_profiles.router, prefix="/v1", tags=["risk-profiles"])
app.include_router(policies.router, prefix="/v1", tags=["policies"])
app.include_router(claims.router, prefix="/v1", tags=["claims"])
app.include_router(treasury.router, prefix="/v1", tags=["treasury"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
