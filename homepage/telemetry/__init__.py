# homepage/telemetry/__init__.py
"""
Telemetry for the homepage service.
"""

from .logger import setup_logging, JSONFormatter, DevelopmentFormatter

__all__ = [
    "setup_logging",
    "JSONFormatter",
    "DevelopmentFormatter"
]
