"""
Command line tools of the Ona UI backend.

    ona-ui seed [--fresh]
    ona-ui validate-config [--skip-services]
    ona-ui upload-assets manifest.json
"""

from .main import cli

__all__ = ["cli"]
