"""
Deterministic fixture seeders for demo and test databases.

Rows get stable ids derived from their natural keys, so seeding twice
updates the same rows instead of duplicating them.
"""

from .runner import SEEDERS, run_seeders

__all__ = ["SEEDERS", "run_seeders"]
