"""Разбор полей запроса: UUID, числа, строки"""
import uuid

from .errors import InvalidInput


def to_uuid(value):
    """UUID из строки или None, если значение пустое или битое"""
    if value is None or value == "":
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None


def require_uuid(value, message):
    """Обязательный идентификатор: пустой или некорректный -> InvalidInput(message)"""
    parsed = to_uuid(value)
    if parsed is None:
        raise InvalidInput(message)
    return parsed


def text(value, max_length=None):
    s = str(value).strip() if value is not None else ""
    return s[:max_length] if max_length else s


def positive_int(value, default):
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return n if n > 0 else default


def flag(value):
    """Булево из JSON или формы: true/"true"/"1"/1"""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
