"""Booking domain - availability resolution and session booking"""

from .router import router

__all__ = ["router"]
