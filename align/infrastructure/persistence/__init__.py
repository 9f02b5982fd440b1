"""Persistence layer: engine lifecycle, ORM models and repositories."""
