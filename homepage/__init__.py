# homepage/__init__.py
"""
Homepage Service

Personal website: rendered blog and feed, owner-only Telegram agent
and scheduled health checks that alert the owner.
"""

__version__ = "1.0.0"
__description__ = "Personal website with blog, Telegram agent and scheduled checks"
