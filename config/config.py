import os


def _flag(name: str, default: str = "0") -> bool:
    return bool(int(os.environ.get(name, default)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

    # Database
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "teamops_db")

    # Dev helpers
    AUTO_INIT_DB = _flag("AUTO_INIT_DB")
    AUTO_SEED_DB = _flag("AUTO_SEED_DB")

    SESSION_SECURE = _flag("SESSION_SECURE")
    NOTIFY_ASYNC = _flag("NOTIFY_ASYNC", "1")

    ACCOUNTING_EMAIL = os.environ.get("ACCOUNTING_EMAIL") or None


DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

SMTP = {
    "host": os.environ.get("SMTP_HOST"),
    "port": int(os.environ.get("SMTP_PORT", "587")),
    "secure": _flag("SMTP_SECURE"),
    "user": os.environ.get("SMTP_USER"),
    "password": os.environ.get("SMTP_PASS"),
    "from": os.environ.get("SMTP_FROM"),
}

# Channel ids per notification category; admins may override them in system configs.
SLACK = {
    "bot_token": os.environ.get("SLACK_BOT_TOKEN"),
    "channels": {
        "schedule": os.environ.get("SLACK_CHANNEL_SCHEDULE"),
        "attendance": os.environ.get("SLACK_CHANNEL_ATTENDANCE"),
        "default": os.environ.get("SLACK_CHANNEL_DEFAULT"),
    },
}

DOCUSIGN = {
    "account_id": os.environ.get("DOCUSIGN_ACCOUNT_ID"),
    "integration_key": os.environ.get("DOCUSIGN_INTEGRATION_KEY"),
    "user_id": os.environ.get("DOCUSIGN_USER_ID"),
    "private_key_base64": os.environ.get("DOCUSIGN_PRIVATE_KEY_BASE64"),
    "base_url": os.environ.get("DOCUSIGN_BASE_URL"),
    "oauth_host": os.environ.get("DOCUSIGN_OAUTH_HOST"),
    "webhook_secret": os.environ.get("DOCUSIGN_WEBHOOK_SECRET"),
    "signer_role_name": os.environ.get("DOCUSIGN_SIGNER_ROLE_NAME"),
}

SEED_ADMIN = {
    "email": os.environ.get("SEED_ADMIN_EMAIL", "admin@example.com"),
    "password": os.environ.get("SEED_ADMIN_PASSWORD", "changeme123"),
    "name": os.environ.get("SEED_ADMIN_NAME", "Admin"),
}
