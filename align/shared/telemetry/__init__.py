"""Logging and distributed tracing setup."""
