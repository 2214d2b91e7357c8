"""Service layer: persistence, auth and board use cases."""
