"""HTTP service for the table formatter."""
