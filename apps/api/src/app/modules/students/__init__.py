"""
Students module - Student portal endpoints.
"""

from .router import router

__all__ = ["router"]
