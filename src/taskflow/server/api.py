"""FastAPI application for the Taskflow REST API."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from ..config import Settings, load_settings
from ..constants import API_PREFIX
from ..domain.models import User
from ..service import BoardService
from ..storage import StorageContainer
from .auth import AuthConfig, create_access_token, create_user_dependency, hash_password, verify_password
from .board_api import create_board_router
from .models import AuthResponse, LoginRequest, RegisterRequest, StatusResponse, UserInfo


def create_app(
    settings: Optional[Settings] = None,
    enable_cors: bool = True,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Resolved settings; loaded from the environment when omitted.
        enable_cors: Whether to enable CORS.

    Returns:
        Configured FastAPI app.
    """
    settings = settings or load_settings()
    container = StorageContainer(settings.data_dir)
    service = BoardService(container)
    auth_config = AuthConfig(settings)
    current_user = create_user_dependency(auth_config, container.users)

    app = FastAPI(
        title="Taskflow",
        description="Ordered task lists with drag-and-drop reordering",
        version="1.0.0",
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.settings = settings
    app.state.container = container
    app.state.service = service

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on {} {}: {}", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Server error"})

    auth_paths = {f"{API_PREFIX}/auth/register", f"{API_PREFIX}/auth/login"}

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        # auth forms answer a flat 400; other routes keep the detailed 422
        if request.url.path in auth_paths:
            logger.info("Rejected {} body: {}", request.url.path, exc.errors())
            return JSONResponse(status_code=400, content={"detail": "Invalid input data"})
        return await request_validation_exception_handler(request, exc)

    @app.get(f"{API_PREFIX}/health", response_model=StatusResponse)
    async def health() -> StatusResponse:
        return StatusResponse(status="ok")

    def _auth_response(user: User) -> AuthResponse:
        token = create_access_token(auth_config, user.id)
        return AuthResponse(token=token, user=UserInfo(**user.public_dict()))

    @app.post(f"{API_PREFIX}/auth/register", response_model=AuthResponse)
    def register(request: RegisterRequest) -> AuthResponse:
        email = request.email.strip().lower()
        if container.users.get_by_email(email) is not None:
            raise HTTPException(status_code=400, detail="Email already exists")
        user = User(
            name=request.name.strip(),
            email=email,
            password_hash=hash_password(request.password, rounds=auth_config.bcrypt_rounds),
        )
        container.users.upsert(user)
        logger.info("Registered user {} ({})", user.id, email)
        return _auth_response(user)

    @app.post(f"{API_PREFIX}/auth/login", response_model=AuthResponse)
    def login(request: LoginRequest) -> AuthResponse:
        user = container.users.get_by_email(request.email)
        if user is None or not verify_password(request.password, user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        logger.info("User {} logged in", user.id)
        return _auth_response(user)

    @app.get(f"{API_PREFIX}/auth/me", response_model=UserInfo)
    def me(user: User = Depends(current_user)) -> UserInfo:
        return UserInfo(**user.public_dict())

    app.include_router(create_board_router(service, current_user), prefix=API_PREFIX)

    return app
