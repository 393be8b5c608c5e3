"""
API endpoints аутентификации покупателей и администраторов.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.core.auth import auth_service, get_current_user
from storefront.core.config import settings
from storefront.db.database import get_db
from storefront.db.models.user import ROLE_USER, User
from storefront.schemas.admin import LoginRequest, LoginResponse, RegisterRequest, UserOut
from storefront.services.session_state import SessionStore, get_session_id, get_session_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    Регистрация покупателя.

    Raises:
        HTTPException: Если email уже занят
    """
    email = payload.email.lower()
    if db.scalar(select(User).where(User.email == email)) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )

    user = User(
        email=email,
        hashed_password=auth_service.get_password_hash(payload.password),
        full_name=payload.full_name,
        role=ROLE_USER,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} registered")
    return user


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Вход по email и паролю.

    Returns:
        JWT токен и информация о пользователе

    Raises:
        HTTPException: При неверных учетных данных
    """
    user = db.scalar(select(User).where(User.email == payload.email.lower()))
    if user is None or not auth_service.verify_password(
        payload.password, user.hashed_password
    ):
        logger.info(f"Failed login for {payload.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    access_token = auth_service.create_access_token(data={"sub": str(user.id)})
    return LoginResponse(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserOut.model_validate(user),
    )


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    """Профиль текущего пользователя (включая роль)."""
    return current_user


@router.post("/logout", status_code=204)
def logout(
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """
    Выход: сбрасывает корзину и последний заказ покупателя.

    Токены не отзываются, клиент просто перестает их отправлять.
    """
    store.reset(session_id)
