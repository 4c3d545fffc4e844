"""JSON HTTP server with an in-memory item store, CORS and request logging."""

__version__ = "0.1.0"