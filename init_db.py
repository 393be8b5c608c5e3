#!/usr/bin/env python3
"""
Скрипт для инициализации базы данных
"""

import logging
import sys

from sqlalchemy import inspect

from storefront.db.database import engine
from storefront.db.models import Base

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("init_db")


def init_database() -> bool:
    """Создает все таблицы в базе данных."""
    logger.info("Инициализация базы данных...")

    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Ошибка создания таблиц: {e}")
        return False

    tables = inspect(engine).get_table_names()
    logger.info(f"Таблиц в базе: {len(tables)}")
    for table in tables:
        logger.info(f"  - {table}")
    return True


if __name__ == "__main__":
    if not init_database():
        sys.exit(1)
