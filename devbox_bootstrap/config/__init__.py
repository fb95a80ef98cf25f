"""
Settings for the bootstrap run.
"""

from .settings import Settings

__all__ = ["Settings"]
