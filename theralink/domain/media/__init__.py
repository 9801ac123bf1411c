"""Media domain - Jitsi video rooms and IntaSend checkout"""

from .router import router

__all__ = ["router"]
