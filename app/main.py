from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.exceptions import (
    CollaboratorUnavailableException,
    ConflictException,
    GuaranteeCoreException,
    NotFoundException,
    ReferenceException,
    UnauthorizedException,
    ValidationException,
)
from app.core.result import Result
from app.routes import (
    claim_routes,
    dashboard_routes,
    landlord_routes,
    policy_routes,
    property_routes,
    tenant_routes,
)
from app.utils.logging import get_logger

LOGGER = get_logger(__name__, level=settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


STATUS_BY_EXCEPTION: dict[type[GuaranteeCoreException], int] = {
    UnauthorizedException: status.HTTP_401_UNAUTHORIZED,
    NotFoundException: status.HTTP_404_NOT_FOUND,
    ReferenceException: status.HTTP_403_FORBIDDEN,
    ConflictException: status.HTTP_409_CONFLICT,
    ValidationException: status.HTTP_400_BAD_REQUEST,
    CollaboratorUnavailableException: status.HTTP_503_SERVICE_UNAVAILABLE,
}


# Every core error leaves the API in the same envelope:
# {"ok": false, "error": {"kind": ..., "message": ...}}
@app.exception_handler(GuaranteeCoreException)
async def core_exception_handler(request: Request, exc: GuaranteeCoreException):
    status_code = STATUS_BY_EXCEPTION.get(type(exc), status.HTTP_400_BAD_REQUEST)
    LOGGER.info(
        "%s %s rejected with %s: %s", request.method, request.url.path, exc.kind, exc.message
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedException) else None
    return JSONResponse(
        status_code=status_code,
        content=Result.failure(exc).to_dict(),
        headers=headers,
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(landlord_routes.router, prefix="/api/landlords", tags=["Landlords"])
app.include_router(property_routes.router, prefix="/api/properties", tags=["Properties"])
app.include_router(tenant_routes.router, prefix="/api/tenants", tags=["Tenants"])
app.include_router(policy_routes.router, prefix="/api/policies", tags=["Policies"])
app.include_router(claim_routes.router, prefix="/api/claims", tags=["Claims"])
app.include_router(dashboard_routes.router, prefix="/api/dashboard", tags=["Dashboard"])
