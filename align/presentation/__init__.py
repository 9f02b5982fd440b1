"""HTTP surface: FastAPI routes, schemas, dependencies and middleware."""
