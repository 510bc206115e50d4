"""Core models and schemas of the API layer."""
