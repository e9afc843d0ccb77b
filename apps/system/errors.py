"""Ошибки API и единый обработчик: любой сбой уходит клиенту как {"error": "..."}"""
import logging

from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Ошибка сервера"


class ApiError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = SERVER_ERROR_MESSAGE


class InvalidInput(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Некорректные данные запроса"


class PayloadTooLarge(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Файл слишком большой"


class InvalidFormat(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Неподдерживаемый формат файла"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Недостаточно прав"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Не найдено"


class StoreUnavailable(ApiError):
    default_detail = "База данных недоступна"


def _flatten(detail):
    """DRF отдаёт detail строкой, списком или словарём; клиенту нужна одна строка"""
    if isinstance(detail, dict):
        parts = []
        for key, value in detail.items():
            text = _flatten(value)
            parts.append(text if key == "detail" else f"{key}: {text}")
        return "; ".join(parts)
    if isinstance(detail, (list, tuple)):
        return "; ".join(_flatten(d) for d in detail)
    return str(detail)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, Http404):
            return Response({"error": "Не найдено"}, status=response.status_code)
        return Response({"error": _flatten(response.data)}, status=response.status_code, headers=_retry_headers(response))
    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Ошибка БД в %s: %s", getattr(view, "__name__", view.__class__.__name__), exc)
        return Response({"error": SERVER_ERROR_MESSAGE}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return None


def _retry_headers(response):
    headers = {}
    for name in ("Allow", "Retry-After"):
        if response.has_header(name):
            headers[name] = response[name]
    return headers
