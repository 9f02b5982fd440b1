"""Align: private venting and AI-mediated conversations."""

__version__ = "1.0.0"
