"""Internal constants shared across the library."""

USERS_AMOUNT = 150
MAX_SCORE = 100
MIN_DELAY_MS = 500
MAX_DELAY_MS = 2000
FAILURE_RATE = 0.1
PAGE_SIZE = 20
RECENT_UPDATES_LIMIT = 5
REFRESH_INTERVAL_S = 30.0

SIMULATED_FAILURE_MESSAGE = "Oops! A simulated network error occurred."
