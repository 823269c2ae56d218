"""
FastAPI application for the public booking page, the owner dashboard
and the Telegram bot webhook

Owner notifications and periodic jobs run in the Celery worker
"""
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from sqlalchemy.orm import sessionmaker

from app.api.middleware.rate_limit_middleware import RateLimitMiddleware
from app.api.v1.router import api_v1_router
from app.config.database import create_db_engine, create_session_factory
from app.config.settings import get_settings
from app.core.exceptions import register_exception_handlers
from app.core.middleware import correlation_id_middleware, request_logging_middleware
from app.core.monitoring import health_router
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.notification.telegram_service import TelegramService
from app.services.registry import build_services
from app.utils.my_logging import setup_logging
from app.webhooks.router import webhook_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    setup_logging()
    logger.info("🚀 Slot Booking API starting up...")

    routes_by_tag = defaultdict(list)
    for route in app.routes:
        if isinstance(route, APIRoute):
            tag = route.tags[0] if route.tags else "other"
            for method in route.methods:
                routes_by_tag[tag].append((method, route.path))

    for tag, routes in sorted(routes_by_tag.items()):
        for method, path in sorted(routes, key=lambda r: (r[1], r[0])):
            logger.debug(f"[{tag}] {method:8} {path}")

    yield

    logger.info("🛑 Slot Booking API shutting down...")


def create_app(
        session_factory: Optional[sessionmaker] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        telegram: Optional[TelegramService] = None
) -> FastAPI:
    """
    Create and configure FastAPI application

    Args:
        session_factory: database sessions for every request and service;
            built from DATABASE_URL when omitted
        dispatcher: owner notification hand-off; Celery-backed by default
        telegram: client used to answer webhook callbacks
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Queue-gated appointment booking with owner notifications",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    if session_factory is None:
        session_factory = create_session_factory(create_db_engine(echo=settings.DEBUG))

    app.state.session_factory = session_factory
    app.state.services = build_services(session_factory, dispatcher)
    app.state.telegram = telegram or TelegramService()

    register_exception_handlers(app)

    app.add_middleware(RateLimitMiddleware, requests_per_second=settings.PUBLIC_RATE_LIMIT_PER_SECOND)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.include_router(webhook_router, prefix="/webhooks", tags=["webhooks"])
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "public": "/api/v1/public/",
                "dashboard": "/api/v1/dashboard/",
                "webhooks": "/webhooks/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        proxy_headers=True,
        forwarded_allow_ips=settings.FORWARDED_ALLOW_IPS,
        log_level="info"
    )
