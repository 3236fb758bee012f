"""Main FastAPI application with modular architecture."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.dependencies import build_container
from .core.exceptions import ExtractionServiceError
from .api import extraction_router, health_router
from .utils.logging import LoggerSetup, CorrelatedLogger
from .utils.response_helpers import ResponseHelper

# Setup logging
LoggerSetup.setup_logging()
logger = CorrelatedLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    if not getattr(app.state, "services", None):
        app.state.services = build_container(settings)
    logger.info(f"{settings.api_title} v{settings.api_version} starting up")

    if settings.enable_health_checks:
        app.state.services.health_monitor.start(settings.health_check_interval_minutes)

    yield

    # Shutdown
    await app.state.services.health_monitor.stop()
    logger.info("Application shutting down")


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    lifespan=lifespan,
    swagger_ui_parameters={
        "defaultModelsExpandDepth": -1,
        "tryItOutEnabled": True,
    }
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

PROTECTED_PATHS = {"/extract": "post", "/transcript": "post", "/cache/stats": "get"}


# Configure OpenAPI security scheme
def custom_openapi():
    """Custom OpenAPI configuration with security."""
    if app.openapi_schema:
        return app.openapi_schema

    from fastapi.openapi.utils import get_openapi
    openapi_schema = get_openapi(
        title=settings.api_title,
        version=settings.api_version,
        description=settings.api_description,
        routes=app.routes,
    )

    # Add security scheme
    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "ApiKeyAuth": {
            "type": "apiKey",
            "in": "header",
            "name": "x-api-key"
        }
    }

    # Apply security to protected endpoints
    for path, method in PROTECTED_PATHS.items():
        if method in openapi_schema["paths"].get(path, {}):
            openapi_schema["paths"][path][method]["security"] = [{"ApiKeyAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


# Global exception handler for service exceptions
@app.exception_handler(ExtractionServiceError)
async def extraction_service_exception_handler(request, exc: ExtractionServiceError):
    """Handle extraction service exceptions."""
    return ResponseHelper.create_error_from_exception(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request, exc: RequestValidationError):
    """Handle malformed request bodies and parameters."""
    return ResponseHelper.create_error_response(
        error_code="VALIDATION_ERROR",
        message="Invalid request",
        status_code=422,
        details={"reason": "; ".join(str(error.get("msg")) for error in exc.errors())}
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle FastAPI HTTP exceptions."""
    return ResponseHelper.create_error_response(
        error_code="HTTP_ERROR",
        message=str(exc.detail),
        status_code=exc.status_code
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error on {request.url.path}: {str(exc)}")

    return ResponseHelper.create_error_response(
        error_code="INTERNAL_SERVER_ERROR",
        message="An unexpected error occurred",
        status_code=500
    )


# Include routers
app.include_router(health_router)
app.include_router(extraction_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "youtube_extraction.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug_mode,
        log_level=settings.log_level.lower()
    )
