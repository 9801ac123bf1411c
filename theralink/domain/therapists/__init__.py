"""Therapists domain - admin review and profile images"""

from .router import router

__all__ = ["router"]
