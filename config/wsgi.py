import logging
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()

# Таблицы создаются при старте процесса; если БД недоступна, сервер поднимается в деградированном режиме
from apps.system.schema import ensure_schema_once  # noqa: E402

if not ensure_schema_once():
    logging.getLogger("apps.system").warning("Схема БД не проверена при старте, работаем на демо-данных")
