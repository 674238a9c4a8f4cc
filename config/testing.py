from .config import DB_CONFIG, SEED_ADMIN

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
SESSION_SECURE = False

# Notifications run inline so tests can observe them.
NOTIFY_ASYNC = False
ACCOUNTING_EMAIL = None

SMTP: dict = {}
SLACK: dict = {"bot_token": None, "channels": {}}
DOCUSIGN: dict = {"webhook_secret": "test-webhook-secret"}

AUTO_INIT_DB = False
AUTO_SEED_DB = False

__all__ = [
    "SECRET_KEY", "DB_CONFIG", "DEBUG", "TESTING", "SESSION_SECURE", "NOTIFY_ASYNC", "ACCOUNTING_EMAIL",
    "AUTO_INIT_DB", "AUTO_SEED_DB", "SMTP", "SLACK", "DOCUSIGN", "SEED_ADMIN",
]
