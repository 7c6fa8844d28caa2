from .settings import *
import os

DEBUG = False
SECRET_KEY = os.environ["SECRET_KEY"]
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(',')

CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000").split(',')
CSRF_TRUSTED_ORIGINS = CORS_ALLOWED_ORIGINS

# Behind a TLS-terminating proxy
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Connection bindings live in one process; run a single ASGI worker.
# A like notification nobody picks up within `expiry` seconds is dropped.
CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels_redis.core.RedisChannelLayer",
        "CONFIG": {
            "hosts": [REDIS_URL],
            "capacity": int(os.getenv("NOTIFICATION_QUEUE_CAPACITY", 100)),
            "expiry": int(os.getenv("NOTIFICATION_EXPIRY", 10)),
        },
    }
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
for _name in ("accounts", "interactions", "realtime", "services"):
    LOGGING["loggers"][_name]["level"] = LOG_LEVEL
