"""REST API for the coaching bookings core."""
