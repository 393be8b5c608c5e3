"""
Исключения предметной области.

Сервисы бросают их вместо HTTPException, а приложение
превращает их в JSON ответ с нужным HTTP статусом.
"""


class StorefrontError(Exception):
    """Базовое исключение приложения."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StorefrontError):
    """Запись (категория, товар, строка таблицы) не найдена."""

    status_code = 404


class ValidationError(StorefrontError):
    """Данные не прошли проверку до обращения к базе данных."""

    status_code = 422


class ConfirmationRequiredError(StorefrontError):
    """Удаление не подтверждено пользователем."""

    status_code = 409


class BackendError(StorefrontError):
    """Ошибка базы данных; сообщение передается пользователю как есть."""

    status_code = 400
