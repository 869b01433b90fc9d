"""Исключения аудита."""


class AuditError(Exception):
    """Базовое исключение для всех ошибок аудита."""


class PolicyError(AuditError):
    """Некорректная таблица политик (обнаруживается при загрузке, не при проверке)."""


class CollectorError(AuditError):
    """Не удалось собрать артефакты страницы (сеть, невалидный URL и т.п.)."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"{url}: {message}")
