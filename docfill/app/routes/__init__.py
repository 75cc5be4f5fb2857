"""
FastAPI Routes.

API 라우트 (모두 /api 아래)
"""

from . import generate, inspect

__all__ = ["generate", "inspect"]
