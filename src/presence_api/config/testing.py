import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "presence_test"),
    "pool_size": 2,
    "pool_timeout": 5,
}

JWT_SECRET = "test-jwt-secret"
JWT_ALGORITHM = "HS256"
SESSION_TOKEN_DAYS = 7
VERIFICATION_TOKEN_HOURS = 24

VERIFY_EMAIL_URL = "http://testserver/api/verify-email"

MAIL_ENABLED = False
MAIL_HOST = "localhost"
MAIL_PORT = 25
MAIL_USERNAME = ""
MAIL_PASSWORD = ""
MAIL_SENDER = "no-reply@testserver"
MAIL_USE_TLS = False

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
