#!/usr/bin/env python3
"""
Скрипт для создания администратора в базе данных.

Если пользователь с таким email уже есть, он получает роль admin
и новый пароль.
"""

import argparse
import logging
import sys

from sqlalchemy import select

from storefront.core.auth import AuthService
from storefront.db.database import SessionLocal
from storefront.db.models.user import ROLE_ADMIN, User

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("create_admin")


def create_admin(email: str, password: str, full_name: str) -> bool:
    """Создает или повышает администратора."""
    db = SessionLocal()
    try:
        user = db.scalar(select(User).where(User.email == email.lower()))
        if user is None:
            user = User(
                email=email.lower(),
                full_name=full_name,
                hashed_password=AuthService.get_password_hash(password),
                role=ROLE_ADMIN,
            )
            db.add(user)
            logger.info(f"Создаем администратора {email}")
        else:
            user.role = ROLE_ADMIN
            user.hashed_password = AuthService.get_password_hash(password)
            logger.info(f"Пользователь {email} уже есть, выдаем роль admin")
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Ошибка при создании администратора: {e}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Создать администратора витрины")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--full-name", default="Administrator")
    args = parser.parse_args()

    if not create_admin(args.email, args.password, args.full_name):
        sys.exit(1)
