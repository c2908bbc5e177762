from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from .security import PasswordHasher
from ..application.services.admin_auth_service import AdminAuthService
from ..application.services.entitlement_service import EntitlementService
from ..domain.errors import AccountError
from ..domain.ports.persistence import KeyValueStore
from ..infrastructure.persistence.memory import InMemoryKeyValueStore
from ..infrastructure.persistence.sqlite import SQLiteKeyValueStore
from ..infrastructure.repositories.account_repository import AccountRepository
from ..presentation.api.routers import admin as admin_router
from ..presentation.api.routers import client as client_router
from ..presentation.api.routers import legacy as legacy_router

logger = logging.getLogger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="VIP Gate", lifespan=_create_lifespan(settings, store, clock))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(admin_router.router)
    app.include_router(client_router.router)
    app.include_router(legacy_router.router)

    app.add_exception_handler(AccountError, _account_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


async def _account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.message},
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    content: Dict[str, Any] = {"status": "error", "message": exc.detail}
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        content.update(message="Not found", path=request.url.path, method=request.method)
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "invalid params") if errors else "invalid params"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "message": message},
    )


def _build_store(settings: Settings) -> KeyValueStore:
    if settings.store_backend == "memory":
        logger.warning("Using in-memory store; accounts will be lost on restart.")
        return InMemoryKeyValueStore()
    return SQLiteKeyValueStore(settings.database_path)


def build_container(
    settings: Settings,
    store: Optional[KeyValueStore] = None,
    clock: Callable[[], float] = time.time,
) -> ApplicationContainer:
    store = store if store is not None else _build_store(settings)
    repository = AccountRepository(store, page_size=settings.list_page_size)
    entitlement_service = EntitlementService(
        repository,
        policy=settings.entitlement_policy(),
        password_hasher=PasswordHasher(rounds=settings.password_hash_rounds),
        clock=clock,
    )
    admin_auth_service = AdminAuthService(settings.admin_secret, settings.device_shared_key)
    return ApplicationContainer(
        settings=settings,
        store=store,
        account_repository=repository,
        entitlement_service=entitlement_service,
        admin_auth_service=admin_auth_service,
    )


def _create_lifespan(
    settings: Settings,
    store: Optional[KeyValueStore],
    clock: Callable[[], float],
):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        container = build_container(settings, store, clock)
        app.state.container = container  # type: ignore[attr-defined]
        policy = container.entitlement_service.policy
        logger.info(
            "Entitlement policy: activation=%s device_binding=%s single_device=%s",
            policy.activation.value,
            policy.device_binding,
            policy.enforce_single_device,
        )
        try:
            yield
        finally:
            container.store.close()

    return lifespan
