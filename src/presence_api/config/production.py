import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "presence_db"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
    "pool_timeout": float(os.getenv("DB_POOL_TIMEOUT", "10")),
}

JWT_SECRET = os.getenv("JWT_SECRET", "please-set-JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
SESSION_TOKEN_DAYS = int(os.getenv("SESSION_TOKEN_DAYS", "7"))
VERIFICATION_TOKEN_HOURS = int(os.getenv("VERIFICATION_TOKEN_HOURS", "24"))

VERIFY_EMAIL_URL = os.getenv("VERIFY_EMAIL_URL", "https://example.com/verify-email")

MAIL_ENABLED = bool(int(os.getenv("MAIL_ENABLED", "1")))
MAIL_HOST = os.getenv("MAIL_HOST", "localhost")
MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
MAIL_SENDER = os.getenv("MAIL_SENDER", "no-reply@example.com")
MAIL_USE_TLS = bool(int(os.getenv("MAIL_USE_TLS", "1")))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
