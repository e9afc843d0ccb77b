"""
Инициализация схемы БД: таблицы создаются при старте процесса, а не миграциями.

Все шаги идемпотентны: отсутствующая таблица создаётся, у существующей
добавляются недостающие колонки. Удаление данных возможно только в
аварийном rebuild_reel_tables().
"""
import logging
import threading

from django.apps import apps as django_apps
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections, transaction

logger = logging.getLogger(__name__)

# Порядок важен только для читаемости лога
SCHEMA_APPS = ("account", "reels", "community", "im")

_schema_lock = threading.Lock()
_schema_ready = False


def schema_models():
    models = []
    for label in SCHEMA_APPS:
        models.extend(django_apps.get_app_config(label).get_models())
    return models


def _columns(connection, table):
    with connection.cursor() as cursor:
        return {col.name for col in connection.introspection.get_table_description(cursor, table)}


def _plan(connection):
    """Что нужно сделать: (модели без таблиц, [(модель, поле)] без колонок)"""
    existing = set(connection.introspection.table_names())
    missing_tables = []
    missing_columns = []
    for model in schema_models():
        table = model._meta.db_table
        if table not in existing:
            missing_tables.append(model)
            continue
        columns = _columns(connection, table)
        for field in model._meta.local_concrete_fields:
            if field.column not in columns:
                missing_columns.append((model, field))
    return missing_tables, missing_columns


def _create_table(editor, model):
    # managed=False: create_model не создаёт Meta.indexes, добавляем их сами
    editor.create_model(model)
    for index in model._meta.indexes:
        editor.add_index(model, index)


def ensure_schema(using=DEFAULT_DB_ALIAS):
    """CREATE TABLE / ADD COLUMN для всего, чего не хватает. Возвращает список выполненных действий."""
    connection = connections[using]
    missing_tables, missing_columns = _plan(connection)
    actions = []

    for model in missing_tables:
        table = model._meta.db_table
        try:
            with connection.schema_editor() as editor:
                _create_table(editor, model)
        except DatabaseError:
            # параллельный процесс мог успеть создать таблицу раньше нас
            if table not in connection.introspection.table_names():
                raise
            logger.info("Таблица %s уже создана другим процессом", table)
            continue
        logger.info("Создана таблица %s", table)
        actions.append(f"create {table}")

    for model, field in missing_columns:
        table = model._meta.db_table
        try:
            with connection.schema_editor() as editor:
                editor.add_field(model, field)
        except DatabaseError:
            if field.column not in _columns(connection, table):
                raise
            continue
        logger.info("Добавлена колонка %s.%s", table, field.column)
        actions.append(f"add {table}.{field.column}")

    return actions


def ensure_schema_once(using=DEFAULT_DB_ALIAS):
    """ensure_schema не чаще одного раза на процесс. False: БД недоступна, работаем в деградированном режиме."""
    global _schema_ready
    if _schema_ready:
        return True
    with _schema_lock:
        if _schema_ready:
            return True
        try:
            actions = ensure_schema(using)
        except DatabaseError as e:
            logger.warning("Не удалось проверить схему БД: %s", e)
            return False
        if actions:
            logger.info("Схема БД обновлена: %s", ", ".join(actions))
        _schema_ready = True
        return True


def mark_schema_stale():
    global _schema_ready
    with _schema_lock:
        _schema_ready = False


def store_available(using=DEFAULT_DB_ALIAS):
    """БД отвечает и таблица reels существует"""
    from apps.reels.models import Reel

    connection = connections[using]
    try:
        connection.ensure_connection()
        return Reel._meta.db_table in connection.introspection.table_names()
    except DatabaseError as e:
        logger.warning("БД недоступна: %s", e)
        return False


MISSING_COLUMN_MARKERS = ("no such column", "unknown column", "does not exist")


def is_missing_column_error(exc):
    """PostgreSQL: column ... does not exist; MySQL: Unknown column; SQLite: no such column"""
    message = str(exc).lower()
    return "column" in message and any(marker in message for marker in MISSING_COLUMN_MARKERS)


MISSING_TABLE_MARKERS = ("no such table", "doesn't exist", "does not exist")


def is_missing_table_error(exc):
    """SQLite: no such table; MySQL: Table ... doesn't exist; PostgreSQL: relation ... does not exist"""
    message = str(exc).lower()
    if "no such table" in message:
        return True
    return ("table" in message or "relation" in message) and any(m in message for m in MISSING_TABLE_MARKERS)


def rebuild_reel_tables(using=DEFAULT_DB_ALIAS):
    """Аварийно пересоздать reel_likes и reels. Все Reels и лайки теряются."""
    from apps.reels.models import Reel, ReelLike

    connection = connections[using]
    existing = set(connection.introspection.table_names())
    logger.warning("Пересоздаём таблицы reel_likes и reels, данные Reels будут потеряны")
    with connection.schema_editor() as editor:
        for model in (ReelLike, Reel):
            if model._meta.db_table in existing:
                editor.delete_model(model)
        for model in (Reel, ReelLike):
            _create_table(editor, model)


def recover_reel_tables(exc, using=DEFAULT_DB_ALIAS):
    """
    Запрос упал на отсутствующей колонке или таблице: сначала CREATE TABLE / ADD COLUMN,
    если не помогло и разрешено настройкой REELS_REBUILD_ON_SCHEMA_ERROR: пересоздание.
    Возвращает "healed", "rebuilt" или None.
    """
    logger.warning("Схема reels устарела: %s", exc)
    mark_schema_stale()
    try:
        ensure_schema(using)
        missing_tables, missing_columns = _plan(connections[using])
        if not missing_tables and not missing_columns:
            return "healed"
    except DatabaseError:
        logger.exception("Не удалось восстановить схему Reels")
    if getattr(settings, "REELS_REBUILD_ON_SCHEMA_ERROR", False):
        try:
            rebuild_reel_tables(using)
        except DatabaseError:
            logger.exception("Не удалось пересоздать таблицы Reels")
            return None
        return "rebuilt"
    return None


def seed_demo_data(using=DEFAULT_DB_ALIAS):
    """Демо-пользователи и их Reels, только если таблицы пустые. Возвращает (users, reels) добавлено."""
    from apps.account.models import User
    from apps.reels.demo import DEMO_REELS, DEMO_USERS
    from apps.reels.models import Reel

    added_users = added_reels = 0
    with transaction.atomic(using=using):
        if not User.objects.using(using).exists():
            for u in DEMO_USERS:
                User.objects.using(using).create(
                    id=u["id"], phone=u["phone"], name=u["name"], surname=u["surname"],
                    bio=u["bio"], gender=u["gender"], avatar_url="",
                )
                added_users += 1
        if not Reel.objects.using(using).exists():
            for r in DEMO_REELS:
                Reel.objects.using(using).create(
                    user_id=r["user_id"],
                    video_url=r["video_url"],
                    video_filename=r["video_filename"],
                    video_mime_type="video/mp4",
                    caption=r["caption"],
                    music=r["music"],
                    likes_count=0,
                    views_count=r["views_count"],
                    duration=r["duration"],
                )
                added_reels += 1
    return added_users, added_reels
