"""FastAPI endpoints (API layer - thin, delegates to CredentialService)"""
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from credential_service import logging_client
from credential_service.config import get_settings
from credential_service.errors import CredentialError, CredentialErrorKind, StoreError
from credential_service.models.requests import (
    CreateUserRequest,
    ChangePasswordRequest,
    UpdateAdminRoleRequest,
    UpdateUserStatusRequest,
)
from credential_service.models.responses import UserResponse, StatusResponse, ErrorResponse
from credential_service.repositories import build_user_store
from credential_service.services.credential_service import CredentialService
from credential_service.utils.crypto import PasswordHasher

settings = get_settings()

# Initialize logger
logger = logging_client.setup_logger(
    settings.SERVICE_NAME,
    log_host=settings.LOGGING_HOST,
    log_port=settings.LOGGING_PORT,
    level=settings.LOG_LEVEL,
    logger_name='credential_service'
)

app = FastAPI(title="Credential Service", version=settings.SERVICE_VERSION)

# Dependency Injection
user_store = build_user_store(settings)
credential_service = CredentialService(
    user_store,
    PasswordHasher.from_settings(settings),
    require_password_for_status_change=settings.REQUIRE_PASSWORD_FOR_STATUS_CHANGE
)

HTTP_STATUS_BY_KIND = {
    CredentialErrorKind.VALIDATION: 400,
    CredentialErrorKind.AUTHENTICATION: 401,
    CredentialErrorKind.NOT_FOUND: 404,
    CredentialErrorKind.STORE: 500,
    CredentialErrorKind.ENTROPY: 500,
    CredentialErrorKind.HASHING: 500,
}


def error_response(error: CredentialError) -> JSONResponse:
    """Map a credential error kind onto an HTTP response."""
    status_code = HTTP_STATUS_BY_KIND[error.kind]
    if isinstance(error, StoreError) and error.duplicate:
        status_code = 409

    if status_code >= 500:
        logger.error(f"{error.kind.value} error: {error}")
        detail = "Internal server error"
    else:
        logger.warning(f"{error.kind.value} error: {error}")
        detail = str(error)

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail, kind=error.kind.value).model_dump()
    )


@app.on_event("startup")
async def startup_event():
    """Initialize DynamoDB table on startup when that backend is selected."""
    if not hasattr(user_store, 'ensure_table'):
        return
    logger.info("Initializing DynamoDB users table...")
    try:
        created = await user_store.ensure_table()
        logger.info("Created users table" if created else "Users table already exists")
    except Exception as e:
        logger.error(f"Failed to initialize DynamoDB table: {e}")
        raise


@app.post("/users", response_model=UserResponse, status_code=201)
async def create_user(request: CreateUserRequest):
    """Create a user account"""
    logger.info(f"Create user: {request.username}")

    try:
        user = await credential_service.create_user(request.to_domain())
    except CredentialError as e:
        return error_response(e)

    return UserResponse.from_domain(user)


@app.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str):
    """Fetch a user account"""
    try:
        user = await credential_service.get_user(user_id)
    except CredentialError as e:
        return error_response(e)

    return UserResponse.from_domain(user)


@app.post("/users/{user_id}/password", response_model=StatusResponse)
async def change_password(user_id: str, request: ChangePasswordRequest):
    """Change password after verifying the current one"""
    logger.info(f"Password change for user {user_id}")

    try:
        await credential_service.change_password(
            user_id=user_id,
            old=request.old_password,
            new=request.new_password
        )
    except CredentialError as e:
        return error_response(e)

    return StatusResponse(status="success")


@app.put("/users/{user_id}/admin", response_model=StatusResponse)
async def update_admin_role(user_id: str, request: UpdateAdminRoleRequest):
    """Grant or revoke the admin flag"""
    logger.info(f"Admin role update for user {user_id}: {request.admin}")

    try:
        await credential_service.update_admin_role(user_id, request.admin)
    except CredentialError as e:
        return error_response(e)

    return StatusResponse(status="success")


@app.put("/users/{user_id}/status", response_model=StatusResponse)
async def update_user_status(user_id: str, request: UpdateUserStatusRequest):
    """Enable or disable a user"""
    logger.info(f"Status update for user {user_id}: enabled={request.enabled}")

    try:
        await credential_service.update_user_status(
            user_id=user_id,
            enabled=request.enabled,
            password=request.password
        )
    except CredentialError as e:
        return error_response(e)

    return StatusResponse(status="success")


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
