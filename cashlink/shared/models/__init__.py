# cashlink/shared/models/__init__.py
"""
Общие модели.
"""

from cashlink.shared.models.common import ErrorResponse, HealthStatus, TransitionResult

__all__ = ["ErrorResponse", "HealthStatus", "TransitionResult"]
