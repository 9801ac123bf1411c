"""Dashboards domain - admin and friend statistics panels"""

from .router import router

__all__ = ["router"]
