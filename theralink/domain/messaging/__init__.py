"""Messaging domain - provider/client message threads"""

from .router import router

__all__ = ["router"]
