"""
Главный модуль FastAPI приложения Storefront API.

Содержит конфигурацию приложения, middleware, обработку
ошибок предметной области и роутеры.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.v1.routers import api_router
from storefront.core.config import settings
from storefront.core.exceptions import StorefrontError
from storefront.services.session_state import SessionStore

# Настройка логирования
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Создать экземпляр приложения.

    Состояние покупателей (корзины и последние заказы) создается
    здесь и живет столько же, сколько приложение.
    """
    app = FastAPI(
        title="Storefront API",
        description="API витрины магазина: каталог, корзина, заказы и админка",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.shoppers = SessionStore()

    # Настройка CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # TODO: сузить в продакшене до домена витрины
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        """Ошибки сервисов превращаются в {"detail": ...} с нужным статусом."""
        logger.debug(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.get("/healthz")
    def healthz():
        """
        Health check endpoint для мониторинга состояния приложения.

        Returns:
            dict: Статус приложения
        """
        return {"status": "ok", "service": "Storefront API", "version": "1.0.0"}

    # Подключение API роутеров
    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
