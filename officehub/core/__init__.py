"""Core utilities: configuration, errors, retry, validation."""
