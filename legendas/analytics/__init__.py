"""
Analytics package exports.
"""

from legendas.analytics.constants import DIRECTION_LABELS, STATE_LABELS
from legendas.analytics.service import build_scope_dashboard
from legendas.analytics.types import ScopeDashboard

__all__ = [
    "DIRECTION_LABELS",
    "STATE_LABELS",
    "build_scope_dashboard",
    "ScopeDashboard",
]
