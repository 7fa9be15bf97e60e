"""Core utilities - configuration, auth, errors, logging."""
