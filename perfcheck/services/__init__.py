"""Application services shared across the HTTP layer."""
