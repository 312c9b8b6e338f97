"""
FastAPI Application Entry Point

Restaurant Ordering API - menu catalog, order submission and the
retrieval-augmented menu assistant.

Endpoints:
    - GET  /api/menu?type=live|static: Menu items
    - GET  /api/orders: List orders with items
    - GET  /api/orders/{id}: One order with items
    - POST /api/orders: Create an order
    - GET  /api/health: Database connectivity probe
    - GET  /api/assistant/status: Assistant readiness
    - POST /api/assistant/ask: Question → answer + cited menu items
    - POST /api/assistant/chat: Chat turn with replayed history
    - POST /api/assistant/reindex: Rebuild the assistant's menu index
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.context import AppContext, get_context
from app.core.config import Settings, get_settings, setup_logging
from app.database import get_db, ping
from app.schemas import (
    AskRequest,
    AssistantStatus,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    MenuItem,
    MenuType,
    OrderCreate,
    OrderResponse,
    RagAnswer,
    ReindexResponse,
)
from app.services.orders import OrderPersistenceError, OrderRepository

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to environment)
        context: Pre-wired application context (tests inject providers here)
    """
    settings = settings or (context.settings if context else get_settings())
    setup_logging(settings)

    # =========================================================================
    # APPLICATION LIFECYCLE
    # =========================================================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   LLM provider: {settings.llm_provider.value}")
        logger.info("=" * 60)

        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing configuration (running degraded): {missing}")

        ctx = context or AppContext.from_settings(settings)
        await ctx.startup()
        app.state.context = ctx

        logger.info("✅ Application ready!")

        yield  # Application runs

        logger.info("Shutting down...")
        await ctx.shutdown()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Restaurant menu, order submission and a retrieval-augmented "
            "menu assistant."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # ROOT & HEALTH ENDPOINTS
    # =========================================================================

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """API root with navigation links."""
        return {
            "message": f"🍣 Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
            "health": "/api/health",
        }

    @app.get(
        "/api/health",
        response_model=HealthResponse,
        responses={503: {"model": HealthResponse}},
        tags=["Health"],
        summary="Database Health Check",
    )
    async def health_check(db: AsyncSession = Depends(get_db)) -> Any:
        """Verify the database answers a trivial query."""
        try:
            await ping(db)
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            unhealthy = HealthResponse(
                status="error",
                database="disconnected",
                timestamp=datetime.now(timezone.utc),
                error=str(e),
            )
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=unhealthy.model_dump(mode="json"),
            )

        return HealthResponse(
            status="ok",
            database="connected",
            timestamp=datetime.now(timezone.utc),
        )

    # =========================================================================
    # MENU ENDPOINTS
    # =========================================================================

    @app.get(
        "/api/menu",
        response_model=list[MenuItem],
        tags=["Menu"],
        summary="Get Menu",
    )
    async def get_menu(
        menu_type: MenuType = Query(MenuType.LIVE, alias="type"),
        ctx: AppContext = Depends(get_context),
    ) -> list[MenuItem]:
        """Static catalog, or an LLM-generated menu that falls back to it."""
        if menu_type == MenuType.STATIC:
            logger.info("📋 Serving static menu")
            return ctx.menu_provider.get_static_menu()
        return await ctx.menu_provider.get_live_menu()

    # =========================================================================
    # ORDER API ENDPOINTS
    # =========================================================================

    @app.post(
        "/api/orders",
        response_model=OrderResponse,
        status_code=status.HTTP_201_CREATED,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        tags=["Orders"],
        summary="Create Order",
    )
    async def create_order(
        order_data: OrderCreate,
        db: AsyncSession = Depends(get_db),
        ctx: AppContext = Depends(get_context),
    ) -> OrderResponse:
        """Persist an order and all of its items atomically."""
        logger.info(
            f"Creating order for: {order_data.first_name} {order_data.last_name} "
            f"({len(order_data.items)} items)"
        )

        repo = OrderRepository(db, enable_performance_logging=ctx.settings.enable_performance_logging)
        try:
            order = await repo.create_order(order_data)
        except OrderPersistenceError as e:
            raise HTTPException(status_code=500, detail=str(e))

        return OrderResponse.model_validate(order)

    @app.get(
        "/api/orders",
        response_model=list[OrderResponse],
        tags=["Orders"],
        summary="List Orders",
    )
    async def list_orders(
        skip: int = Query(0, ge=0),
        limit: Optional[int] = Query(None, ge=1, le=500),
        db: AsyncSession = Depends(get_db),
        ctx: AppContext = Depends(get_context),
    ) -> list[OrderResponse]:
        """Orders newest first, each with its items."""
        repo = OrderRepository(db, enable_performance_logging=ctx.settings.enable_performance_logging)
        orders = await repo.list_orders(skip=skip, limit=limit)
        return [OrderResponse.model_validate(order) for order in orders]

    @app.get(
        "/api/orders/{order_id}",
        response_model=OrderResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Orders"],
    )
    async def get_order(
        order_id: int,
        db: AsyncSession = Depends(get_db),
        ctx: AppContext = Depends(get_context),
    ) -> OrderResponse:
        """Get a specific order by ID."""
        repo = OrderRepository(db, enable_performance_logging=ctx.settings.enable_performance_logging)
        order = await repo.get_order(order_id)

        if not order:
            raise HTTPException(status_code=404, detail=f"Order #{order_id} not found")

        return OrderResponse.model_validate(order)

    # =========================================================================
    # ASSISTANT ENDPOINTS
    # =========================================================================

    @app.get(
        "/api/assistant/status",
        response_model=AssistantStatus,
        tags=["Assistant"],
    )
    async def assistant_status(ctx: AppContext = Depends(get_context)) -> AssistantStatus:
        """Whether the assistant and its menu index are ready."""
        return ctx.assistant.status()

    @app.post(
        "/api/assistant/ask",
        response_model=RagAnswer,
        tags=["Assistant"],
    )
    async def assistant_ask(
        request_data: AskRequest,
        ctx: AppContext = Depends(get_context),
    ) -> RagAnswer:
        """Answer a menu question with the cited menu items."""
        return await ctx.rag.ask(request_data.question)

    @app.post(
        "/api/assistant/chat",
        response_model=ChatResponse,
        tags=["Assistant"],
    )
    async def assistant_chat(
        request_data: ChatRequest,
        ctx: AppContext = Depends(get_context),
    ) -> ChatResponse:
        """One chat turn; the client replays earlier turns in ``history``."""
        return await ctx.assistant.chat(request_data.message, request_data.history)

    @app.post(
        "/api/assistant/reindex",
        response_model=ReindexResponse,
        tags=["Assistant"],
    )
    async def assistant_reindex(
        menu_type: MenuType = Query(MenuType.STATIC, alias="type"),
        ctx: AppContext = Depends(get_context),
    ) -> ReindexResponse:
        """Rebuild the assistant's menu index from the static or live menu."""
        return await ctx.assistant.reindex(menu_type)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Client-fixable input errors, reported per field."""
        detail = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            detail.append({"field": field or "body", "message": error.get("msg", "Invalid value")})

        logger.info(f"Rejected request to {request.url.path}: {detail}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error="Validation Error", detail=detail).model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal Server Error",
                detail=str(exc) if settings.debug else "An unexpected error occurred",
            ).model_dump(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=_settings.api_host,
        port=_settings.api_port,
        reload=_settings.is_development,
    )
