"""
Configuration module for the webhook interceptor.
"""

from .settings import Settings, FilterHeaderNames

__all__ = ["Settings", "FilterHeaderNames"]
