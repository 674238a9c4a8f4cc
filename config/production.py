import os

from .config import DB_CONFIG, DOCUSIGN, SEED_ADMIN, SLACK, SMTP, Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
SESSION_SECURE = True
NOTIFY_ASYNC = Config.NOTIFY_ASYNC
ACCOUNTING_EMAIL = Config.ACCOUNTING_EMAIL

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB

__all__ = [
    "SECRET_KEY", "DB_CONFIG", "DEBUG", "SESSION_SECURE", "NOTIFY_ASYNC", "ACCOUNTING_EMAIL",
    "AUTO_INIT_DB", "AUTO_SEED_DB", "SMTP", "SLACK", "DOCUSIGN", "SEED_ADMIN",
]
