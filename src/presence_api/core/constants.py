"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_VERIFICATION_HOURS = 24
DEFAULT_HISTORY_LIMIT = 30
MIN_PASSWORD_LENGTH = 6

TOKEN_PURPOSE_SESSION = "session"
TOKEN_PURPOSE_VERIFY_EMAIL = "verify_email"
