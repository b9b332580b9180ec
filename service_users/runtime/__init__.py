"""Runtime helpers for the users service (metrics)."""
