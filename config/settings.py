# Подключение к БД и Redis берётся из переменных окружения, значения по умолчанию для локальной разработки
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-secret-change-in-production")
DEBUG = os.environ.get("DEBUG", "1") == "1"
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "corsheaders",
    "apps.account",
    "apps.reels",
    "apps.community",
    "apps.im",
    "apps.system",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"
CORS_ALLOW_ALL_ORIGINS = True
APPEND_SLASH = False  # иначе POST /api/reels/upload уходит в редирект и теряет тело

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

DB_ENGINE = os.environ.get("DB_ENGINE", "mysql")
DB_CONNECT_TIMEOUT = int(os.environ.get("DB_CONNECT_TIMEOUT", "10"))

DATABASES = {
    "default": {
        "ENGINE": f"django.db.backends.{DB_ENGINE}",
        "NAME": os.environ.get("DB_NAME", "coolpep"),
        "USER": os.environ.get("DB_USER", "root"),
        "PASSWORD": os.environ.get("DB_PASSWORD", ""),
        "HOST": os.environ.get("DB_HOST", "localhost"),
        "PORT": os.environ.get("DB_PORT", "3306"),
        "CONN_MAX_AGE": int(os.environ.get("DB_CONN_MAX_AGE", "60")),
        "OPTIONS": {},
    }
}
if DB_ENGINE == "mysql":
    DATABASES["default"]["OPTIONS"] = {"charset": "utf8mb4", "connect_timeout": DB_CONNECT_TIMEOUT}
elif DB_ENGINE == "postgresql":
    # Пул ограничен: при исчерпании запрос ждёт соединение до timeout, затем падает с ошибкой БД
    DATABASES["default"]["CONN_MAX_AGE"] = 0
    DATABASES["default"]["OPTIONS"] = {
        "connect_timeout": DB_CONNECT_TIMEOUT,
        "pool": {
            "min_size": 1,
            "max_size": int(os.environ.get("DB_POOL_MAX_SIZE", "10")),
            "timeout": DB_CONNECT_TIMEOUT,
        },
    }
elif DB_ENGINE == "sqlite3":
    DATABASES["default"] = {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "coolpep.sqlite3")),
    }

CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/0"),
        "OPTIONS": {"CLIENT_CLASS": "django_redis.client.DefaultClient"},
    }
}
# Redis недоступен: кэш ведёт себя как пустой, запросы не падают
DJANGO_REDIS_IGNORE_EXCEPTIONS = True
DJANGO_REDIS_LOG_IGNORED_EXCEPTIONS = True
SESSION_ENGINE = "django.contrib.sessions.backends.cache"
SESSION_CACHE_ALIAS = "default"

LANGUAGE_CODE = "ru-ru"
TIME_ZONE = "Europe/Moscow"
USE_TZ = True
STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "apps.system.errors.api_exception_handler",
}

# Видео хранится в БД в base64: тело запроса с 10 МБ видео раздувается примерно на треть
DATA_UPLOAD_MAX_MEMORY_SIZE = int(os.environ.get("DATA_UPLOAD_MAX_MEMORY_SIZE", str(16 * 1024 * 1024)))
FILE_UPLOAD_MAX_MEMORY_SIZE = DATA_UPLOAD_MAX_MEMORY_SIZE

# Код подтверждения: без SMS-шлюза всегда фиксированный
VERIFICATION_CODE = os.environ.get("VERIFICATION_CODE", "1234")
VERIFICATION_CODE_TTL = 5 * 60

REELS_MAX_VIDEO_BYTES = int(os.environ.get("REELS_MAX_VIDEO_BYTES", str(10 * 1024 * 1024)))
REELS_FEED_DEFAULT_LIMIT = int(os.environ.get("REELS_FEED_DEFAULT_LIMIT", "20"))
REELS_FEED_MAX_LIMIT = 50
REELS_DEFAULT_DURATION = 15
# Аварийный путь: пересоздать reels/reel_likes, если колонка так и не появилась после ALTER TABLE
REELS_REBUILD_ON_SCHEMA_ERROR = os.environ.get("REELS_REBUILD_ON_SCHEMA_ERROR", "0") == "1"

# Статические страницы фронтенда (reels-feed.html, upload-video.html, launch.html)
PUBLIC_DIR = Path(os.environ.get("PUBLIC_DIR", str(BASE_DIR / "public")))

# Логи: apps.* пишутся в консоль и в logs/coolpep.log
_log_dir = BASE_DIR / "logs"
_log_file = "/tmp/coolpep.log"
try:
    _log_dir.mkdir(parents=True, exist_ok=True)
    _log_file = str(_log_dir / "coolpep.log")
except OSError:
    pass  # пишем в /tmp/coolpep.log

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "default"},
        "file": {
            "class": "logging.FileHandler",
            "filename": _log_file,
            "encoding": "utf-8",
            "formatter": "default",
        },
    },
    "loggers": {
        "apps": {
            "level": os.environ.get("LOG_LEVEL", "INFO"),
            "handlers": ["console", "file"],
            "propagate": False,
        },
    },
}
