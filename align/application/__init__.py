"""Application layer: conversation modes, turn pipeline services and use cases."""
