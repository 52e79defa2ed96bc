import os
import os.path

import dj_database_url


def get_list(text):
    return [item.strip() for item in text.split(",") if item.strip()]


def get_bool_from_env(name, default_value):
    if name in os.environ:
        value = os.environ[name]
        try:
            return {"true": True, "1": True, "false": False, "0": False}[
                value.strip().lower()
            ]
        except KeyError as e:
            raise ValueError(f"{value} is an invalid value for {name}") from e
    return default_value


PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))

DEBUG = get_bool_from_env("DEBUG", True)

SECRET_KEY = os.environ.get("SECRET_KEY", "")
if not SECRET_KEY and DEBUG:
    SECRET_KEY = "channelsync-insecure-development-key"

ALLOWED_HOSTS = get_list(os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1"))

DATABASE_CONNECTION_DEFAULT_NAME = "default"

DATABASES = {
    DATABASE_CONNECTION_DEFAULT_NAME: dj_database_url.config(
        default="sqlite:///" + os.path.join(PROJECT_ROOT, "channelsync.sqlite3"),
        conn_max_age=int(os.environ.get("DB_CONN_MAX_AGE", 600)),
    ),
}

DEFAULT_AUTO_FIELD = "django.db.models.AutoField"

TIME_ZONE = "UTC"
USE_TZ = True
LANGUAGE_CODE = "en"

INSTALLED_APPS = [
    "channelsync.core",
    "channelsync.product",
    "channelsync.warehouse",
    "channelsync.order",
    "channelsync.shipping",
    "channelsync.returns",
    "channelsync.retailops",
]

DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "USD")
DEFAULT_CURRENCY_CODE_LENGTH = 3
DEFAULT_MAX_DIGITS = 20
DEFAULT_DECIMAL_PLACES = 3

# Channel (RetailOps) integration
RETAILOPS_RMA_NUMBER_PREFIX = os.environ.get("RETAILOPS_RMA_NUMBER_PREFIX", "RMA-ROP-")
RETAILOPS_CUSTOMER_RETURN_NUMBER_PREFIX = os.environ.get(
    "RETAILOPS_CUSTOMER_RETURN_NUMBER_PREFIX", "CR-ROP-"
)
RETAILOPS_RETURN_REASON_KEYWORD = os.environ.get(
    "RETAILOPS_RETURN_REASON_KEYWORD", "retailops"
)
RETAILOPS_EXPORT_LIMIT = int(os.environ.get("RETAILOPS_EXPORT_LIMIT", 50))
# Import strings resolved once per synchronization call; hosts swap in their own
# line item updater, shipping pricing or post-writeback hook here.
RETAILOPS_LINE_ITEM_UPDATER = os.environ.get(
    "RETAILOPS_LINE_ITEM_UPDATER",
    "channelsync.retailops.line_items.LineItemReconciler",
)
RETAILOPS_SHIPPING_PRICE_CALCULATOR = os.environ.get(
    "RETAILOPS_SHIPPING_PRICE_CALCULATOR",
    "channelsync.retailops.adjustments.DefaultShippingPriceCalculator",
)
RETAILOPS_AFTER_WRITEBACK = os.environ.get("RETAILOPS_AFTER_WRITEBACK") or None

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": (
                "%(levelname)s %(asctime)s %(name)s %(process)d %(thread)d %(message)s"
            )
        },
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {"level": "WARNING", "handlers": ["console"]},
    "loggers": {
        "django": {"level": "INFO", "propagate": True},
        "channelsync": {"level": LOG_LEVEL, "propagate": True},
    },
}
