"""
Infrastructure layer - Frameworks & Drivers.

Configuration, persistence, identity tokens and the language model client.
"""
