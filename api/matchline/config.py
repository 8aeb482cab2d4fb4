import os

MATCH_TIMEZONE = os.getenv("MATCH_TIMEZONE", "America/New_York")
OPENER_MIN_LENGTH = int(os.getenv("OPENER_MIN_LENGTH", "36"))
MESSAGE_MAX_LENGTH = int(os.getenv("MESSAGE_MAX_LENGTH", "2000"))
SUBSCRIPTION_PERIOD_DAYS = int(os.getenv("SUBSCRIPTION_PERIOD_DAYS", "30"))
MESSAGES_PAGE_MAX = int(os.getenv("MESSAGES_PAGE_MAX", "100"))
SNOOZE_MAX_HOURS = int(os.getenv("SNOOZE_MAX_HOURS", "720"))

# Daily match quota per subscription tier. Unknown tiers fall back to "free".
DAILY_MATCH_LIMITS: dict[str, int] = {
    "free": 5,
    "premium": 50,
    "vip": 100,
}
DEFAULT_TIER = "free"

JWT_SECRET = os.getenv("JWT_SECRET", "")
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:8081,http://127.0.0.1:8081,http://localhost:19006").split(",")
    if o.strip()
]

RL_CONVERSATION_CREATE_LIMIT = int(os.getenv("RL_CONVERSATION_CREATE_LIMIT", "30"))
RL_MESSAGE_SEND_LIMIT = int(os.getenv("RL_MESSAGE_SEND_LIMIT", "120"))
RL_MATCH_INTERACT_LIMIT = int(os.getenv("RL_MATCH_INTERACT_LIMIT", "200"))
RL_WINDOW_SECONDS = int(os.getenv("RL_WINDOW_SECONDS", "60"))
