"""HTTP API package: the FastAPI app and its request/response models."""
