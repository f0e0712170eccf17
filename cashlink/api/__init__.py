# cashlink/api/__init__.py
"""
HTTP API (FastAPI).
"""

from cashlink.api.app import create_app

__all__ = ["create_app"]
