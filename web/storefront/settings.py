"""Django settings for the storefront order backend.

Everything is read once at start-up from the environment. A ``.env`` file
in the working directory or next to ``manage.py`` is loaded first when
present.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # .../web

load_dotenv(Path.cwd() / ".env")
load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


# ---- Core ----
APP_ENV = os.getenv("APP_ENV", "production").lower()
DEBUG = APP_ENV == "development"
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-insecure-change-me")
ALLOWED_HOSTS = _env_list("ALLOWED_HOSTS", "localhost,127.0.0.1")

INSTALLED_APPS = [
    "corsheaders",
    "rest_framework",
    "apps.catalog",
    "apps.orders",
    "apps.monitoring",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "gateway.middleware.RequestIdMiddleware",
    "gateway.middleware.RequestLogMiddleware",
    "gateway.middleware.ApiSizeLimitMiddleware",
]

ROOT_URLCONF = "storefront.urls"
WSGI_APPLICATION = "storefront.wsgi.application"
APPEND_SLASH = False

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {},
    },
]

# No relational database: all state lives in the catalog JSON document.
DATABASES = {}

CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
}

USE_TZ = True
TIME_ZONE = "UTC"

# ---- Catalog store ----
CATALOG_DB_PATH = os.getenv("CATALOG_DB_PATH", str(BASE_DIR / "db.json"))
CATALOG_PRODUCTS_COLLECTION = os.getenv("CATALOG_PRODUCTS_COLLECTION", "products")

# ---- Mail / notifier ----
EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.gmail.com")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_USE_TLS = _env_bool("EMAIL_USE_TLS", True)
EMAIL_HOST_USER = os.getenv("EMAIL_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_PASS", "")
EMAIL_TIMEOUT = float(os.getenv("EMAIL_TIMEOUT", "10"))
DEFAULT_FROM_EMAIL = EMAIL_HOST_USER or "webmaster@localhost"
ORDER_NOTIFICATION_RECIPIENT = os.getenv("ORDER_NOTIFICATION_RECIPIENT", EMAIL_HOST_USER)
STORE_NAME = os.getenv("STORE_NAME", "Storefront")
CURRENCY_LABEL = os.getenv("CURRENCY_LABEL", "Rs.")
USE_MAIL_NOTIFIER = _env_bool("USE_MAIL_NOTIFIER", bool(EMAIL_HOST_USER))
HEALTH_CHECK_MAIL = _env_bool("HEALTH_CHECK_MAIL", False)

# ---- CORS ----
CORS_ALLOWED_ORIGINS = _env_list("CORS_ALLOWED_ORIGINS")
# no configured origins: accept any origin
CORS_ALLOW_ALL_ORIGINS = not CORS_ALLOWED_ORIGINS
CORS_EXPOSE_HEADERS = ["X-Total-Count", "X-Request-ID"]

# ---- Security headers ----
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
SECURE_CROSS_ORIGIN_OPENER_POLICY = "same-origin"

# ---- REST framework ----
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "gateway.exceptions.api_exception_handler",
    "DEFAULT_THROTTLE_RATES": {
        "place_order": os.getenv("THROTTLE_PLACE_ORDER", "20/min"),
        "catalog_read": os.getenv("THROTTLE_CATALOG_READ", "300/min"),
        "catalog_write": os.getenv("THROTTLE_CATALOG_WRITE", "60/min"),
    },
}

# ---- Logging ----
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "gateway.logging_filters.RequestIdFilter"},
    },
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "filters": ["request_id"],
        },
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
