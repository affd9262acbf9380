"""
Configuration for density evaluation.
"""

from .config import Settings, settings

__all__ = ['Settings', 'settings']
