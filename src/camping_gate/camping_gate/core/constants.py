"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 20
DEFAULT_SYNC_LOG_LIMIT = 50
SYNC_BATCH_TYPE = "batch"

# Legacy credential tokens look like "QR-00012345".
LEGACY_QR_PATTERN = r"^QR-\d+$"

MYSQL_DUPLICATE_KEY = 1062
MYSQL_MISSING_PARENT = 1452

ALREADY_ADMITTED = "already admitted this shift"
