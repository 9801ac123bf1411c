"""Notes domain - booking notes kept by providers"""

from .router import router

__all__ = ["router"]
