"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
SESSION_COOKIE_NAME = "teamops_session"

MIN_PASSWORD_LENGTH = 8

TAX_RATE = 0.1

# Bill-to line printed on invoice workbooks.
INVOICE_ADDRESSEE = "株式会社SALT2"
YEN_FORMAT = "¥#,##0"

EVALUATION_HISTORY_DEFAULT = 12
EVALUATION_HISTORY_MAX = 36
SCORE_LABELS = ["", "要改善", "普通以下", "標準", "優秀", "卓越"]

MAX_WORKLOAD_HOURS = 744

SECRET_CONFIG_KEYS = frozenset({"slack_bot_token"})
