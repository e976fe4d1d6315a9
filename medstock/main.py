"""
MedStock FastAPI Main Application
Entry point for the inventory ledger REST API
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medstock.api.v1.api_router import api_router
from medstock.core.config import settings
from medstock.core.database import check_db_connection, init_db
from medstock.core.exceptions import InventoryException, StorageFailureError
from medstock.core.logging import setup_logging, get_logger

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown tasks

    Creates missing tables when the database is reachable.
    """
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if check_db_connection():
        init_db()
        logger.info("Database connection established")
    else:
        logger.error("Database unreachable on startup; requests will fail until it recovers")

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## MedStock Inventory API

    Stock ledger for a medical supply operation.

    ### Key Features:
    - **Principal / secondary storage** with merge-on-name stock entry
    - **Transfers** from principal to secondary storage, atomically logged
    - **Medication lots** with expiry tracking and withdrawal logging
    - **Alerts** for expired, expiring and low-stock medication
    - **CSV export** of storage listings
    """,
    docs_url=settings.DOCS_URL,
    openapi_url=settings.OPENAPI_URL,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InventoryException)
async def inventory_exception_handler(request: Request, exc: InventoryException):
    """
    Map domain errors to HTTP responses

    Storage failures are reported without internals unless DEBUG is on.
    """
    if isinstance(exc, StorageFailureError) or exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        detail = exc.message if settings.DEBUG else "An unexpected error occurred"
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})

    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unhandled errors
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
        }
    )


@app.get("/health", tags=["System"])
async def health_check():
    """
    Health check endpoint for monitoring and load balancers
    """
    db_status = check_db_connection()
    return {
        "status": "healthy" if db_status else "degraded",
        "version": settings.APP_VERSION,
        "database": "connected" if db_status else "disconnected",
    }


@app.get("/info", tags=["System"])
async def system_info():
    return {
        "application": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api_version": "v1",
        "docs_url": settings.DOCS_URL,
        "expiry_warning_days": settings.EXPIRY_WARNING_DAYS,
        "transfer_zero_stock_policy": settings.TRANSFER_ZERO_STOCK_POLICY.value,
    }


app.include_router(api_router, prefix=settings.API_V1_STR)


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run(
        "medstock.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
