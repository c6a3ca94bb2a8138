#!/usr/bin/env python3
"""
CDL Matchmaker API - FastAPI Application

Read API over stored driver/job and company/candidate match scores, plus
driver feedback, recompute requests and rollout control.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException

from .config import get_config
from .exceptions import (
    ServiceException,
    service_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import (
    matches_router,
    candidates_router,
    feedback_router,
    rollout_router,
    recompute_router
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="CDL Matchmaker API",
    description="Driver/job match scores with explanations",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Register exception handlers
app.add_exception_handler(ServiceException, service_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(matches_router)
app.include_router(candidates_router)
app.include_router(feedback_router)
app.include_router(rollout_router)
app.include_router(recompute_router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "cdl-matchmaker"}


def main():
    """Run the web server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    config = get_config()

    logger.info(f"Starting CDL Matchmaker API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
