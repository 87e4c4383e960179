"""Product catalog constants."""

# Seconds an in-memory reservation waits for one product lock before
# reporting a ReservationConflict.
DEFAULT_RESERVATION_LOCK_TIMEOUT = 5.0
