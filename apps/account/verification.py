"""Коды подтверждения регистрации хранятся в Redis 5 минут"""
from django.conf import settings
from django.core.cache import cache

CODE_PREFIX = "verify:code:"
TTL = getattr(settings, "VERIFICATION_CODE_TTL", 5 * 60)  # секунды


def issue_code(user_id) -> str:
    code = settings.VERIFICATION_CODE
    cache.set(CODE_PREFIX + str(user_id), code, timeout=TTL)
    return code


def check_code(user_id, code: str) -> bool:
    """Сверить код; если в кэше ничего нет (истёк или Redis недоступен), принимается фиксированный код"""
    if not code:
        return False
    key = CODE_PREFIX + str(user_id)
    stored = cache.get(key)
    if stored is None:
        expected = settings.VERIFICATION_CODE
    else:
        expected = stored.decode("utf-8") if isinstance(stored, bytes) else str(stored)
    if code.strip() != expected.strip():
        return False
    cache.delete(key)
    return True
