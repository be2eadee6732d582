"""
Application package for the ZEDLY client gateway.
"""

from .main import ZedlyClient

__all__ = ["ZedlyClient"]
