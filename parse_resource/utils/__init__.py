"""
Utilities package for parse-resource.

Exports shared helpers for logging and name inflection.
Keep this package lightweight and free of backend-specific logic.
"""

from parse_resource.utils.logging import configure_logging, get_logger
from parse_resource.utils.naming import camelize, foreign_key_for, singularize

__all__ = [
    "camelize",
    "configure_logging",
    "foreign_key_for",
    "get_logger",
    "singularize",
]
