"""Shared logging, configuration and error types."""
