"""
Состояние покупателей.

Хранилище создается один раз при старте приложения и выдает
каждому покупателю (по идентификатору сессии) его корзину
и последний оформленный заказ. Сессии, к которым долго не
обращались, удаляются.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional

from fastapi import Depends, Header, HTTPException, Request

from storefront.core.config import settings
from storefront.schemas.orders import LastOrder
from storefront.services.cart import Cart

logger = logging.getLogger(__name__)


class ShopperState:
    """
    Корзина и последний заказ одного покупателя.

    Изменения корзины и оформление заказа выполняются под lock,
    запросы одного покупателя могут идти параллельно.
    """

    def __init__(self):
        self.cart = Cart()
        self.last_order: Optional[LastOrder] = None
        self.lock = threading.RLock()

    def clear_last_order(self) -> None:
        self.last_order = None


class SessionStore:
    """
    Потокобезопасное хранилище состояний покупателей.

    Args:
        ttl: Через сколько секунд без обращений сессия удаляется
        clock: Источник времени (монотонные секунды)
    """

    def __init__(
        self,
        ttl: float = settings.SHOPPER_SESSION_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._clock = clock
        self._states: Dict[str, ShopperState] = {}
        self._seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _evict_idle(self, now: float) -> None:
        expired = [sid for sid, seen in self._seen.items() if now - seen > self.ttl]
        for session_id in expired:
            del self._states[session_id]
            del self._seen[session_id]
        if expired:
            logger.info(f"Evicted {len(expired)} idle shopper session(s)")

    def get(self, session_id: str) -> ShopperState:
        """Получить состояние покупателя, создав его при первом обращении."""
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            state = self._states.get(session_id)
            if state is None:
                state = ShopperState()
                self._states[session_id] = state
            self._seen[session_id] = now
            return state

    def peek(self, session_id: str) -> ShopperState:
        """
        Состояние покупателя только для чтения.

        Неизвестная сессия получает пустое состояние, которое
        в хранилище не попадает.
        """
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            state = self._states.get(session_id)
            if state is None:
                return ShopperState()
            self._seen[session_id] = now
            return state

    def reset(self, session_id: str) -> None:
        """Сбросить корзину и последний заказ (выход из аккаунта)."""
        with self._lock:
            self._seen.pop(session_id, None)
            if self._states.pop(session_id, None) is not None:
                logger.info(f"Shopper session {session_id} reset")

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._states

    def __len__(self) -> int:
        return len(self._states)


def get_session_store(request: Request) -> SessionStore:
    """Dependency: хранилище, созданное при старте приложения."""
    return request.app.state.shoppers


def get_session_id(x_session_id: str = Header(..., alias="X-Session-Id")) -> str:
    """Dependency: идентификатор сессии покупателя из заголовка."""
    session_id = x_session_id.strip()
    if not session_id:
        raise HTTPException(400, detail="X-Session-Id header must not be empty")
    return session_id


def get_shopper_state(
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> ShopperState:
    """Dependency: состояние текущего покупателя (создается при необходимости)."""
    return store.get(session_id)


def peek_shopper_state(
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> ShopperState:
    """Dependency: состояние покупателя для чтения, новую сессию не создает."""
    return store.peek(session_id)
