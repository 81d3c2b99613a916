"""API endpoint handlers."""

from . import status, view_state

__all__ = [
    "status",
    "view_state",
]
