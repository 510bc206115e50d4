"""
Exception handlers for the Ona UI server.

This package contains the handlers that turn service errors, request
validation failures, HTTP errors and unexpected exceptions into the JSON
error envelope, and a setup function to register them with the application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
