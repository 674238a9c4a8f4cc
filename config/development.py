from .config import DB_CONFIG, DOCUSIGN, SEED_ADMIN, SLACK, SMTP, Config, _flag

SECRET_KEY = Config.SECRET_KEY

DEBUG = True
SESSION_SECURE = False
NOTIFY_ASYNC = Config.NOTIFY_ASYNC
ACCOUNTING_EMAIL = Config.ACCOUNTING_EMAIL

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = _flag("AUTO_INIT_DB", "1")
# Optional: also create the first admin account on startup
AUTO_SEED_DB = Config.AUTO_SEED_DB

__all__ = [
    "SECRET_KEY", "DB_CONFIG", "DEBUG", "SESSION_SECURE", "NOTIFY_ASYNC", "ACCOUNTING_EMAIL",
    "AUTO_INIT_DB", "AUTO_SEED_DB", "SMTP", "SLACK", "DOCUSIGN", "SEED_ADMIN",
]
