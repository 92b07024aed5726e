"""Main FastAPI application."""
import logging
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import Settings, get_settings
from app.database import create_engine
from app.exceptions import ServerError, ServiceError
from app.api import (
    ward_approvals_router,
    approvals_router,
    activity_router,
    transactions_router,
    swaps_router,
    wards_router,
    internal_router,
)
from app.schemas.common import ErrorResponse, HealthResponse
from app.store import SQLAlchemyStore
from postgrest_adapter import PostgRESTClient, PostgRESTError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

settings = get_settings()


async def open_store(settings: Settings, stack: AsyncExitStack):
    """Create the configured store; resources are released when ``stack`` closes."""
    if settings.store_backend == "postgrest":
        client = await stack.enter_async_context(PostgRESTClient())
        logger.info(f"Using PostgREST store at {client.settings.url}")
        return client

    engine = create_engine(settings)
    stack.push_async_callback(engine.dispose)
    logger.info("Using SQLAlchemy store")
    return SQLAlchemyStore(engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Cloak Approvals Service...")

    async with AsyncExitStack() as stack:
        app.state.store = await open_store(settings, stack)
        yield
        logger.info("Shutting down...")

    logger.info("Shutdown complete")


app = FastAPI(
    title="Cloak Approvals - Ward Approvals & Activity API",
    description="""
## Ward approval workflow and unified activity feed

### Features
- **Ward Approvals**: Multi-party state machine (ward signature, guardian decision, optional 2FA at each hop)
- **2FA Approvals**: Single-party approvals confirmed from a second device
- **Push Outbox**: Durable, idempotent ward approval events for an external dispatcher
- **Activity Feed**: Transactions, swaps and ward requests merged across ownership relations

### Security
- API keys (`X-API-Key`), stored as SHA-256 hashes
- Internal endpoints guarded by `X-Internal-Secret`
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(request: Request, status_code: int, error: str, error_code: str, details=None) -> JSONResponse:
    if details is not None and not isinstance(details, dict):
        details = {"detail": details}
    body = ErrorResponse(
        correlation_id=request.headers.get("X-Correlation-ID", "unknown"),
        error=error,
        error_code=error_code,
        details=details,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """Map service errors onto their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"Service error: {exc}", exc_info=True)
    return _error_response(request, exc.status_code, exc.message, exc.error_code, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are 400s."""
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        "VALIDATION_ERROR",
        {"errors": errors},
    )


# Store failures
@app.exception_handler(SQLAlchemyError)
@app.exception_handler(PostgRESTError)
async def store_exception_handler(request: Request, exc: Exception):
    """Backend failures are reported as ServerError."""
    logger.error(f"Store failure: {exc}", exc_info=True)
    error = ServerError("Store operation failed")
    return _error_response(request, error.status_code, error.message, error.error_code)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "INTERNAL_ERROR",
    )


# Include routers
app.include_router(ward_approvals_router)
app.include_router(approvals_router)
app.include_router(activity_router)
app.include_router(transactions_router)
app.include_router(swaps_router)
app.include_router(wards_router)
app.include_router(internal_router)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", store_backend=settings.store_backend)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
