"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_NOTIFICATION_LIMIT = 50
DEFAULT_IDENTITY_TIMEOUT_SECONDS = 5.0
DEFAULT_IDENTITY_MIRROR_RETRIES = 2
FIRST_USER_POSITION = "System Administrator"
CALLER_HEADER = "X-User-Id"
