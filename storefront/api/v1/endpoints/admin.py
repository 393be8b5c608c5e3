"""
API эндпоинты для административной панели.

Все эндпоинты требуют роли admin. Таблицы редактируются
через универсальный CRUD: после каждого изменения
возвращается перечитанная таблица.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from storefront.core.auth import require_admin
from storefront.db.database import get_db, get_session_factory
from storefront.schemas.admin import DashboardOut, DashboardStats
from storefront.services import admin_tables
from storefront.services.admin_tables import EditMode, TableName

router = APIRouter(dependencies=[Depends(require_admin)])


# ==================== ДАШБОРД ====================


@router.get("/dashboard", response_model=DashboardOut)
def get_dashboard(session_factory: sessionmaker = Depends(get_session_factory)):
    """
    Все таблицы и статистика одним запросом.

    Таблицы загружаются параллельно; если какая-то не загрузилась,
    она возвращается пустой, а ошибка попадает в errors.
    """
    return admin_tables.load_dashboard(session_factory)


@router.get("/stats", response_model=DashboardStats)
def get_stats(db: Session = Depends(get_db)):
    """Выручка, количество заказов, товаров и пользователей."""
    return admin_tables.dashboard_stats(db)


# ==================== ТАБЛИЦЫ ====================


@router.get("/tables/{table}", response_model=List[dict])
def list_rows(table: TableName, db: Session = Depends(get_db)):
    """Все строки таблицы."""
    return admin_tables.fetch_table(db, table)


@router.get("/tables/{table}/blank", response_model=dict)
def blank_row(table: TableName):
    """
    Пустая запись для формы добавления.

    Raises:
        ValidationError: Таблица только для чтения (422)
    """
    config = admin_tables.TABLES[table]
    return {
        "record": admin_tables.new_blank(table).model_dump(mode="json", exclude={"id"}),
        "fields": config.fields,
    }


@router.post("/tables/{table}", response_model=List[dict], status_code=201)
def add_row(
    table: TableName,
    record: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    """
    Добавить запись. Переданный id игнорируется.

    Raises:
        ValidationError: Не заполнены обязательные поля (422)
        BackendError: Ошибка базы данных, текст как есть (400)
    """
    return admin_tables.save(db, EditMode.ADD, table, record)


@router.put("/tables/{table}/{row_id}", response_model=List[dict])
def edit_row(
    table: TableName,
    row_id: int,
    record: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    """
    Обновить запись по id из пути.

    Raises:
        ValidationError: Не заполнены обязательные поля (422)
        NotFoundError: Записи нет (404)
        BackendError: Ошибка базы данных, текст как есть (400)
    """
    return admin_tables.save(db, EditMode.EDIT, table, record, original_id=row_id)


@router.delete("/tables/{table}/{row_id}", response_model=List[dict])
def delete_row(
    table: TableName,
    row_id: int,
    confirm: bool = Query(False, description="Подтверждение удаления"),
    db: Session = Depends(get_db),
):
    """
    Удалить запись. Требует confirm=true.

    Raises:
        ConfirmationRequiredError: Удаление не подтверждено (409)
        NotFoundError: Записи нет (404)
        BackendError: Ошибка базы данных, текст как есть (400)
    """
    return admin_tables.delete_row(db, table, row_id, confirmed=confirm)
