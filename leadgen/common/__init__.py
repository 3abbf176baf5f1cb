"""Shared infrastructure: configuration, logging, errors, retries, storage."""
