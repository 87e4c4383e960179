"""Order admission constants.

Defaults for the reservation retry policy; ``providers`` reads
overrides from Django settings.
"""

# Total reservation attempts when the catalog reports a ReservationConflict.
DEFAULT_RESERVATION_MAX_ATTEMPTS = 3

# Linear backoff: attempt N sleeps N * backoff seconds before retrying.
DEFAULT_RESERVATION_RETRY_BACKOFF = 0.05

ORDER_NUMBER_MAX_RETRIES = 5
