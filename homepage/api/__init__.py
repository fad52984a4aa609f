# homepage/api/__init__.py
"""
API layer for the homepage service.

HTTP endpoints and webhook authentication.
"""

from .http_server import HomepageAPI, common_template_data
from .auth import WebhookSecretValidator, AuthDependency

__all__ = [
    "HomepageAPI",
    "common_template_data",
    "WebhookSecretValidator",
    "AuthDependency"
]
