"""Application-wide constants.

Centralizes table names, RPC names and validation limits so the backend
adapters and repositories agree on them.
"""

# ============== TABLES ==============
USERS_TABLE = "users"
OFFICES_TABLE = "offices"
BOOKINGS_TABLE = "bookings"

# ============== RPC ==============
INCREMENT_BOOKING_COUNT_RPC = "increment_booking_count"

# ============== EMBEDS ==============
# Columns of the requester embedded in owner-side booking queries
BOOKING_REQUESTER_COLUMNS = ("id", "email", "full_name", "phone_number")

# ============== RETRY ==============
PROFILE_RETRY_ATTEMPTS = 3
PROFILE_RETRY_DELAY_SECONDS = 1.0

# ============== VALIDATION ==============
MIN_PASSWORD_LENGTH = 6
TIME_FORMAT = "%H:%M"
