from align.presentation.api.v1.routes import mediate, surfaces, vent

__all__ = ["mediate", "surfaces", "vent"]
